"""Financial statistics, expenses and salary payments."""

from datetime import date, datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import get_config
from ..core.exceptions import NotFoundError, ValidationError
from ..core.logger import audit_log, get_logger
from ..models.finance import Expense, Invoice, SalaryPayment
from ..utils.date_utils import month_range, parse_datetime, parse_month, period_range, previous_period

logger = get_logger(__name__)

SALARY_STATUSES = ('pending', 'paid')

GROWTH_THRESHOLD = 10.0
EXPENSE_RATIO_THRESHOLD = 0.5
MARGIN_THRESHOLD = 20.0


def build_insights(
    unpaid_count: int,
    growth: float,
    total_expenses: float,
    paid_revenue: float,
    margin: float,
    by_category: Dict[str, float],
) -> List[str]:
    """Plain-language hints shown on the finance dashboard."""
    insights = []

    if unpaid_count > 0:
        plural = 's' if unpaid_count > 1 else ''
        insights.append(f"{unpaid_count} invoice{plural} pending payment - Follow up needed")

    if growth > GROWTH_THRESHOLD:
        insights.append(f"Revenue up {growth:.1f}% from last period!")
    elif growth < -GROWTH_THRESHOLD:
        insights.append(f"Revenue down {abs(growth):.1f}% - Consider marketing efforts")

    if total_expenses > paid_revenue * EXPENSE_RATIO_THRESHOLD:
        insights.append("Expenses are over 50% of revenue - Review cost optimization")

    if margin < MARGIN_THRESHOLD:
        insights.append("Profit margin below 20% - Consider price adjustments")

    if by_category and total_expenses > 0:
        category, amount = max(by_category.items(), key=lambda entry: entry[1])
        insights.append(f"Highest expense: {category} ({amount / total_expenses * 100:.0f}%)")

    return insights


class FinanceService:
    """Revenue, cost and profit reporting over invoices, expenses and salaries."""

    def __init__(self, config=None):
        self.config = config or get_config()

    async def _invoices_between(self, session: AsyncSession, start: datetime, end: datetime) -> List[Invoice]:
        result = await session.execute(
            select(Invoice).where(Invoice.issue_date >= start, Invoice.issue_date <= end)
        )
        return list(result.scalars().all())

    async def financial_stats(
        self,
        session: AsyncSession,
        month: Optional[str] = None,
        year: Optional[str] = None,
        today: Optional[date] = None,
    ) -> Dict[str, Any]:
        """Revenue, expenses, salaries, profit and insights for one period.

        Growth compares paid revenue with the previous calendar month (or
        year, when reporting on a year).
        """
        start, end, label = period_range(month, year, today)

        invoices = await self._invoices_between(session, start, end)
        total_revenue = sum(inv.total_amount for inv in invoices)
        paid_revenue = sum(inv.paid_amount for inv in invoices)
        status_counts = {status: 0 for status in ('paid', 'partial', 'unpaid')}
        for inv in invoices:
            if inv.payment_status in status_counts:
                status_counts[inv.payment_status] += 1

        expenses = await self.list_expenses(session, start=start, end=end)
        total_expenses = sum(exp.amount for exp in expenses)
        by_category: Dict[str, float] = {}
        for exp in expenses:
            by_category[exp.category] = by_category.get(exp.category, 0) + exp.amount

        salaries = await self.list_salaries(session, start=start, end=end, status='paid')
        total_salaries = sum(sal.net_amount for sal in salaries)

        profit = paid_revenue - total_expenses - total_salaries
        margin = profit / paid_revenue * 100 if paid_revenue > 0 else 0

        prev_start, prev_end = previous_period(start, yearly=bool(year) and not month)
        prev_revenue = sum(inv.paid_amount for inv in await self._invoices_between(session, prev_start, prev_end))
        growth = (paid_revenue - prev_revenue) / prev_revenue * 100 if prev_revenue > 0 else 0

        return {
            'period': {
                'startDate': start.isoformat(),
                'endDate': end.isoformat(),
                'label': label,
            },
            'revenue': {
                'total': total_revenue,
                'paid': paid_revenue,
                'pending': total_revenue - paid_revenue,
                'invoiceCount': len(invoices),
                'paidCount': status_counts['paid'],
                'partialCount': status_counts['partial'],
                'unpaidCount': status_counts['unpaid'],
                'growth': growth,
            },
            'expenses': {
                'total': total_expenses,
                'count': len(expenses),
                'byCategory': by_category,
            },
            'salaries': {
                'total': total_salaries,
                'count': len(salaries),
            },
            'profit': {
                'amount': profit,
                'margin': margin,
            },
            'insights': build_insights(
                status_counts['unpaid'], growth, total_expenses, paid_revenue, margin, by_category
            ),
        }

    # Expenses

    async def list_expenses(
        self,
        session: AsyncSession,
        category: Optional[str] = None,
        month: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[Expense]:
        """Expenses newest first; ``month`` takes precedence over ``start``/``end``."""
        stmt = select(Expense).order_by(Expense.date.desc())
        if category and category != 'all':
            stmt = stmt.where(Expense.category == category)
        if month:
            start, end = month_range(*parse_month(month))
        if start and end:
            stmt = stmt.where(Expense.date >= start, Expense.date <= end)
        result = await session.execute(stmt)
        return list(result.scalars().all())

    async def create_expense(self, session: AsyncSession, data: Dict[str, Any]) -> Expense:
        if not data.get('category') or not data.get('description'):
            raise ValidationError("Category and description are required")
        if data.get('amount') is None or data['amount'] < 0:
            raise ValidationError("Amount must be a positive number")
        if not data.get('date'):
            raise ValidationError("Date is required")

        expense = Expense()
        expense.update_from_dict({**data, 'date': parse_datetime(data['date'])})
        session.add(expense)
        await session.commit()
        logger.info(f"Recorded expense {expense.category}: {expense.amount}")
        return expense

    async def get_expense(self, session: AsyncSession, expense_id: str) -> Expense:
        expense = await session.get(Expense, expense_id)
        if expense is None:
            raise NotFoundError("Expense", expense_id)
        return expense

    async def update_expense(self, session: AsyncSession, expense_id: str, data: Dict[str, Any]) -> Expense:
        expense = await self.get_expense(session, expense_id)
        if 'date' in data:
            data = {**data, 'date': parse_datetime(data['date'])}
        expense.update_from_dict(data)
        await session.commit()
        return expense

    async def delete_expense(self, session: AsyncSession, expense_id: str) -> None:
        expense = await self.get_expense(session, expense_id)
        await session.delete(expense)
        await session.commit()
        audit_log("EXPENSE_DELETED", id=expense_id)

    # Salaries

    async def list_salaries(
        self,
        session: AsyncSession,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        status: Optional[str] = None,
        team_member_id: Optional[str] = None,
    ) -> List[SalaryPayment]:
        stmt = select(SalaryPayment).order_by(SalaryPayment.payment_date.desc())
        if start and end:
            stmt = stmt.where(SalaryPayment.payment_date >= start, SalaryPayment.payment_date <= end)
        if status:
            stmt = stmt.where(SalaryPayment.status == status)
        if team_member_id:
            stmt = stmt.where(SalaryPayment.team_member_id == team_member_id)
        result = await session.execute(stmt)
        return list(result.scalars().all())

    async def create_salary(self, session: AsyncSession, data: Dict[str, Any]) -> SalaryPayment:
        if data.get('gross_amount') is None or data.get('net_amount') is None:
            raise ValidationError("Gross and net amounts are required")
        if data.get('status', 'pending') not in SALARY_STATUSES:
            raise ValidationError(f"Invalid status: {data['status']}")
        if not data.get('payment_date'):
            raise ValidationError("Payment date is required")

        payment = SalaryPayment()
        payment.update_from_dict({**data, 'payment_date': parse_datetime(data['payment_date'])})
        session.add(payment)
        await session.commit()
        await session.refresh(payment, attribute_names=['team_member'])
        audit_log("SALARY_RECORDED", id=payment.id, net=payment.net_amount, status=payment.status)
        return payment

    async def get_salary(self, session: AsyncSession, salary_id: str) -> SalaryPayment:
        payment = await session.get(SalaryPayment, salary_id)
        if payment is None:
            raise NotFoundError("Salary payment", salary_id)
        return payment

    async def update_salary(self, session: AsyncSession, salary_id: str, data: Dict[str, Any]) -> SalaryPayment:
        payment = await self.get_salary(session, salary_id)
        if data.get('status') and data['status'] not in SALARY_STATUSES:
            raise ValidationError(f"Invalid status: {data['status']}")
        if 'payment_date' in data:
            data = {**data, 'payment_date': parse_datetime(data['payment_date'])}
        payment.update_from_dict(data)
        await session.commit()
        await session.refresh(payment, attribute_names=['team_member'])
        return payment

    async def delete_salary(self, session: AsyncSession, salary_id: str) -> None:
        payment = await self.get_salary(session, salary_id)
        await session.delete(payment)
        await session.commit()
        audit_log("SALARY_DELETED", id=salary_id)
