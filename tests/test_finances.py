"""Tests for financial statistics, expenses and salaries."""

import pytest
from datetime import date, datetime

from photo_studio.core.exceptions import NotFoundError, ValidationError
from photo_studio.models import Invoice, TeamMember
from photo_studio.services.finances import FinanceService, build_insights


@pytest.fixture
def finances(test_config):
    return FinanceService(test_config)


def _invoice(number, issued, total, paid, status):
    return Invoice(
        invoice_number=number,
        client_name="Client",
        items=[],
        subtotal=total,
        total_amount=total,
        paid_amount=paid,
        payment_status=status,
        issue_date=issued,
    )


@pytest.fixture
async def team_member(test_db_session):
    member = TeamMember(name="Karim", role="Photographer")
    test_db_session.add(member)
    await test_db_session.commit()
    return member


@pytest.fixture
async def ledger(test_db_session, finances, team_member):
    """Two months of invoices, expenses and salaries."""
    test_db_session.add_all([
        _invoice("INV-2025-001", datetime(2025, 5, 10), 800, 800, 'paid'),
        _invoice("INV-2025-002", datetime(2025, 6, 5), 1000, 1000, 'paid'),
        _invoice("INV-2025-003", datetime(2025, 6, 20), 500, 0, 'unpaid'),
    ])
    await test_db_session.commit()

    await finances.create_expense(test_db_session, {
        'category': "Equipment", 'description': "Lens", 'amount': 300, 'date': "2025-06-03",
    })
    await finances.create_expense(test_db_session, {
        'category': "Marketing", 'description': "Ads", 'amount': 100, 'date': "2025-06-15T09:00:00Z",
    })
    await finances.create_expense(test_db_session, {
        'category': "Rent", 'description': "Studio rent", 'amount': 900, 'date': "2025-07-01",
    })

    await finances.create_salary(test_db_session, {
        'team_member_id': team_member.id, 'gross_amount': 250, 'net_amount': 200,
        'payment_date': "2025-06-30T12:00:00Z", 'status': "paid", 'period': "2025-06",
    })
    await finances.create_salary(test_db_session, {
        'team_member_id': team_member.id, 'gross_amount': 600, 'net_amount': 500,
        'payment_date': "2025-06-30T12:00:00Z", 'status': "pending", 'period': "2025-06",
    })


class TestFinancialStats:
    """Test period statistics."""

    @pytest.mark.asyncio
    async def test_month_stats(self, finances, test_db_session, ledger):
        stats = await finances.financial_stats(test_db_session, month="2025-06")

        assert stats['period']['label'] == "2025-06"
        assert stats['revenue']['total'] == 1500
        assert stats['revenue']['paid'] == 1000
        assert stats['revenue']['pending'] == 500
        assert stats['revenue']['invoiceCount'] == 2
        assert stats['revenue']['paidCount'] == 1
        assert stats['revenue']['unpaidCount'] == 1
        assert stats['revenue']['growth'] == pytest.approx(25.0)
        assert stats['expenses']['total'] == 400
        assert stats['expenses']['byCategory'] == {"Equipment": 300, "Marketing": 100}
        assert stats['salaries'] == {'total': 200, 'count': 1}
        assert stats['profit']['amount'] == 400
        assert stats['profit']['margin'] == pytest.approx(40.0)
        assert stats['insights'] == [
            "1 invoice pending payment - Follow up needed",
            "Revenue up 25.0% from last period!",
            "Highest expense: Equipment (75%)",
        ]

    @pytest.mark.asyncio
    async def test_year_stats(self, finances, test_db_session, ledger):
        stats = await finances.financial_stats(test_db_session, year="2025")

        assert stats['period']['label'] == "2025"
        assert stats['revenue']['paid'] == 1800
        assert stats['revenue']['growth'] == 0
        assert stats['expenses']['total'] == 1300

    @pytest.mark.asyncio
    async def test_empty_current_month(self, finances, test_db_session):
        stats = await finances.financial_stats(test_db_session, today=date(2025, 2, 10))

        assert stats['period']['label'] == "Current Month"
        assert stats['period']['startDate'] == "2025-02-01T00:00:00"
        assert stats['revenue']['total'] == 0
        assert stats['profit']['margin'] == 0
        assert stats['insights'] == ["Profit margin below 20% - Consider price adjustments"]

    @pytest.mark.asyncio
    async def test_invalid_month(self, finances, test_db_session):
        with pytest.raises(ValidationError):
            await finances.financial_stats(test_db_session, month="June")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("params", [{'year': "0000"}, {'month': "0001-01"}, {'year': "0001"}])
    async def test_period_before_calendar_start(self, finances, test_db_session, params):
        with pytest.raises(ValidationError):
            await finances.financial_stats(test_db_session, **params)


class TestInsights:

    def test_revenue_drop_and_high_expenses(self):
        insights = build_insights(
            unpaid_count=3, growth=-30.0, total_expenses=800, paid_revenue=1000, margin=5.0,
            by_category={"Rent": 800},
        )

        assert insights == [
            "3 invoices pending payment - Follow up needed",
            "Revenue down 30.0% - Consider marketing efforts",
            "Expenses are over 50% of revenue - Review cost optimization",
            "Profit margin below 20% - Consider price adjustments",
            "Highest expense: Rent (100%)",
        ]

    def test_healthy_period(self):
        assert build_insights(0, 5.0, 0, 1000, 60.0, {}) == []


class TestExpensesAndSalaries:

    @pytest.mark.asyncio
    async def test_expense_filters(self, finances, test_db_session, ledger):
        june = await finances.list_expenses(test_db_session, month="2025-06")
        rent = await finances.list_expenses(test_db_session, category="Rent")

        assert [e.description for e in june] == ["Ads", "Lens"]
        assert [e.description for e in rent] == ["Studio rent"]
        assert len(await finances.list_expenses(test_db_session, category="all")) == 3

    @pytest.mark.asyncio
    async def test_expense_validation(self, finances, test_db_session):
        with pytest.raises(ValidationError, match="Category and description"):
            await finances.create_expense(test_db_session, {'amount': 10, 'date': "2025-06-01"})
        with pytest.raises(ValidationError, match="positive"):
            await finances.create_expense(test_db_session, {
                'category': "Misc", 'description': "Refund", 'amount': -5, 'date': "2025-06-01",
            })
        with pytest.raises(ValidationError, match="Date is required"):
            await finances.create_expense(test_db_session, {'category': "Misc", 'description': "X", 'amount': 5})

    @pytest.mark.asyncio
    async def test_update_and_delete_expense(self, finances, test_db_session):
        expense = await finances.create_expense(test_db_session, {
            'category': "Travel", 'description': "Fuel", 'amount': 40, 'date': "2025-06-01",
        })

        updated = await finances.update_expense(test_db_session, expense.id, {'amount': 55, 'date': "2025-06-02"})
        assert updated.amount == 55
        assert updated.date == datetime(2025, 6, 2)

        await finances.delete_expense(test_db_session, expense.id)
        with pytest.raises(NotFoundError):
            await finances.get_expense(test_db_session, expense.id)

    @pytest.mark.asyncio
    async def test_salary_team_member_name(self, finances, test_db_session, ledger, team_member):
        salaries = await finances.list_salaries(test_db_session, team_member_id=team_member.id)

        assert len(salaries) == 2
        assert all(s.team_member_name == "Karim" for s in salaries)
        assert [s.net_amount for s in await finances.list_salaries(test_db_session, status="pending")] == [500]

    @pytest.mark.asyncio
    async def test_salary_status_validation(self, finances, test_db_session):
        with pytest.raises(ValidationError, match="Invalid status"):
            await finances.create_salary(test_db_session, {
                'gross_amount': 100, 'net_amount': 80, 'payment_date': "2025-06-01", 'status': "late",
            })

    @pytest.mark.asyncio
    async def test_mark_salary_paid(self, finances, test_db_session):
        payment = await finances.create_salary(test_db_session, {
            'gross_amount': 100, 'net_amount': 80, 'payment_date': "2025-06-01",
        })
        assert payment.status == "pending"
        assert payment.team_member_name is None

        paid = await finances.update_salary(test_db_session, payment.id, {'status': "paid"})
        assert paid.status == "paid"
