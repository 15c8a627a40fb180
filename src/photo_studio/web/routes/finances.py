"""Finance routes: statistics, invoices, expenses and salaries."""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.config import Config
from ...core.logger import get_logger
from ...database.session import get_db_dependency
from ...services import CloudinaryClient, FinanceService, InvoiceService
from ...services.invoice_pdf import generate_and_store, render_invoice_pdf
from ...utils.date_utils import month_range, parse_month
from ..deps import get_app_config, get_cdn, get_finance_service, get_invoice_service, require_admin
from ..schemas import (
    ExpenseCreate,
    ExpenseResponse,
    ExpenseUpdate,
    InvoiceCreate,
    InvoiceResponse,
    InvoiceUpdate,
    MessageResponse,
    PdfResponse,
    SalaryCreate,
    SalaryResponse,
    SalaryUpdate,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["finances"], dependencies=[Depends(require_admin)])


@router.get("/finances/stats")
async def financial_stats(
    month: Optional[str] = None,
    year: Optional[str] = None,
    session: AsyncSession = Depends(get_db_dependency),
    finances: FinanceService = Depends(get_finance_service),
) -> Dict[str, Any]:
    """Revenue, expenses, salaries and profit for a month (default: current) or a year."""
    return await finances.financial_stats(session, month=month, year=year)


# Invoices

@router.post("/admin/bookings/{booking_id}/invoices", response_model=InvoiceResponse, status_code=201)
async def create_invoice(
    booking_id: str,
    body: InvoiceCreate,
    session: AsyncSession = Depends(get_db_dependency),
    invoices: InvoiceService = Depends(get_invoice_service),
):
    return await invoices.create_invoice(session, booking_id, body.model_dump(exclude_unset=True))


@router.get("/admin/invoices", response_model=List[InvoiceResponse])
async def list_invoices(
    booking_id: Optional[str] = Query(None, alias="bookingId"),
    session: AsyncSession = Depends(get_db_dependency),
    invoices: InvoiceService = Depends(get_invoice_service),
):
    return await invoices.list_invoices(session, booking_id=booking_id)


@router.get("/admin/invoices/{invoice_id}", response_model=InvoiceResponse)
async def get_invoice(
    invoice_id: str,
    session: AsyncSession = Depends(get_db_dependency),
    invoices: InvoiceService = Depends(get_invoice_service),
):
    return await invoices.get_invoice(session, invoice_id)


@router.patch("/admin/invoices/{invoice_id}", response_model=InvoiceResponse)
async def update_invoice(
    invoice_id: str,
    body: InvoiceUpdate,
    session: AsyncSession = Depends(get_db_dependency),
    invoices: InvoiceService = Depends(get_invoice_service),
):
    """Edit an invoice or record a payment."""
    return await invoices.update_invoice(session, invoice_id, body.model_dump(exclude_unset=True))


@router.delete("/admin/invoices/{invoice_id}", response_model=MessageResponse)
async def delete_invoice(
    invoice_id: str,
    session: AsyncSession = Depends(get_db_dependency),
    invoices: InvoiceService = Depends(get_invoice_service),
):
    await invoices.delete_invoice(session, invoice_id)
    return MessageResponse(message="Invoice deleted")


@router.post("/admin/invoices/{invoice_id}/pdf", response_model=PdfResponse)
async def generate_invoice_pdf(
    invoice_id: str,
    session: AsyncSession = Depends(get_db_dependency),
    invoices: InvoiceService = Depends(get_invoice_service),
    cdn: CloudinaryClient = Depends(get_cdn),
):
    """Render the invoice PDF and store it on the CDN."""
    invoice = await invoices.get_invoice(session, invoice_id)
    pdf_url = await generate_and_store(session, invoice, cdn)
    return PdfResponse(pdf_url=pdf_url)


@router.get("/admin/invoices/{invoice_id}/pdf")
async def download_invoice_pdf(
    invoice_id: str,
    session: AsyncSession = Depends(get_db_dependency),
    invoices: InvoiceService = Depends(get_invoice_service),
    config: Config = Depends(get_app_config),
):
    invoice = await invoices.get_invoice(session, invoice_id)
    pdf = render_invoice_pdf(invoice, config.studio)
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={'Content-Disposition': f'attachment; filename="{invoice.invoice_number}.pdf"'},
    )


# Expenses

@router.get("/admin/expenses", response_model=List[ExpenseResponse])
async def list_expenses(
    category: Optional[str] = None,
    month: Optional[str] = None,
    session: AsyncSession = Depends(get_db_dependency),
    finances: FinanceService = Depends(get_finance_service),
):
    return await finances.list_expenses(session, category=category, month=month)


@router.post("/admin/expenses", response_model=ExpenseResponse, status_code=201)
async def create_expense(
    body: ExpenseCreate,
    session: AsyncSession = Depends(get_db_dependency),
    finances: FinanceService = Depends(get_finance_service),
):
    return await finances.create_expense(session, body.model_dump())


@router.put("/admin/expenses/{expense_id}", response_model=ExpenseResponse)
async def update_expense(
    expense_id: str,
    body: ExpenseUpdate,
    session: AsyncSession = Depends(get_db_dependency),
    finances: FinanceService = Depends(get_finance_service),
):
    return await finances.update_expense(session, expense_id, body.model_dump(exclude_unset=True))


@router.delete("/admin/expenses/{expense_id}", response_model=MessageResponse)
async def delete_expense(
    expense_id: str,
    session: AsyncSession = Depends(get_db_dependency),
    finances: FinanceService = Depends(get_finance_service),
):
    await finances.delete_expense(session, expense_id)
    return MessageResponse(message="Expense deleted")


# Salaries

@router.get("/admin/salaries", response_model=List[SalaryResponse])
async def list_salaries(
    month: Optional[str] = None,
    status: Optional[str] = None,
    team_member_id: Optional[str] = Query(None, alias="teamMemberId"),
    session: AsyncSession = Depends(get_db_dependency),
    finances: FinanceService = Depends(get_finance_service),
):
    start = end = None
    if month:
        start, end = month_range(*parse_month(month))
    return await finances.list_salaries(
        session, start=start, end=end, status=status, team_member_id=team_member_id
    )


@router.post("/admin/salaries", response_model=SalaryResponse, status_code=201)
async def create_salary(
    body: SalaryCreate,
    session: AsyncSession = Depends(get_db_dependency),
    finances: FinanceService = Depends(get_finance_service),
):
    return await finances.create_salary(session, body.model_dump())


@router.put("/admin/salaries/{salary_id}", response_model=SalaryResponse)
async def update_salary(
    salary_id: str,
    body: SalaryUpdate,
    session: AsyncSession = Depends(get_db_dependency),
    finances: FinanceService = Depends(get_finance_service),
):
    return await finances.update_salary(session, salary_id, body.model_dump(exclude_unset=True))


@router.delete("/admin/salaries/{salary_id}", response_model=MessageResponse)
async def delete_salary(
    salary_id: str,
    session: AsyncSession = Depends(get_db_dependency),
    finances: FinanceService = Depends(get_finance_service),
):
    await finances.delete_salary(session, salary_id)
    return MessageResponse(message="Salary payment deleted")
