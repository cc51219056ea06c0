"""
Reportes de ventas y cifras del dashboard.

Solo cuentan como ventas las estadías con checkout y pagadas. Los rangos de
fechas aplican al día de checkout, inclusivos en ambos extremos.
"""
from datetime import date, datetime, time, timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy import Date, and_, case, func
from sqlalchemy.orm import Session

from models.enums import EntityStatus, PaymentState, TransactionStatus, UserRole
from models.hotel import Rate, Transaction
from models.tenant import Branch, Tenant
from models.user import User
from utils.billing_engine import quantize_money


def _checkout_window(start_date: Optional[date], end_date: Optional[date]) -> list:
    conditions = []
    if start_date is not None:
        conditions.append(Transaction.check_out_time >= datetime.combine(start_date, time.min))
    if end_date is not None:
        conditions.append(Transaction.check_out_time < datetime.combine(end_date + timedelta(days=1), time.min))
    return conditions


def _is_paid_sale():
    return and_(
        Transaction.status == TransactionStatus.CHECKED_OUT,
        Transaction.is_paid == PaymentState.PAID,
    )


class ReportService:

    @staticmethod
    def dashboard_summary(
        db: Session, tenant_id: int, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> Dict[str, Any]:
        """
        Ventas pagadas del tenant más una fila por sucursal.
        Las sucursales sin actividad en el rango aparecen igual, en cero.
        """
        window = _checkout_window(start_date, end_date)

        total_sales = (
            db.query(func.coalesce(func.sum(Transaction.total_amount), 0))
            .filter(Transaction.tenant_id == tenant_id, _is_paid_sale(), *window)
            .scalar()
        )

        paid_amount = case((_is_paid_sale(), Transaction.total_amount), else_=0)
        rows = (
            db.query(
                Branch.id.label("branch_id"),
                Branch.branch_name.label("branch_name"),
                func.count(Transaction.id).label("transaction_count"),
                func.coalesce(func.sum(paid_amount), 0).label("total_sales"),
            )
            .outerjoin(
                Transaction,
                and_(Transaction.branch_id == Branch.id, Transaction.tenant_id == Branch.tenant_id, *window),
            )
            .filter(Branch.tenant_id == tenant_id)
            .group_by(Branch.id, Branch.branch_name)
            .order_by(Branch.branch_name.asc())
            .all()
        )

        return {
            "start_date": start_date,
            "end_date": end_date,
            "total_sales": quantize_money(total_sales),
            "branch_performance": [
                {
                    "branch_id": row.branch_id,
                    "branch_name": row.branch_name,
                    "transaction_count": row.transaction_count,
                    "total_sales": quantize_money(row.total_sales),
                }
                for row in rows
            ],
        }

    @staticmethod
    def detailed_sales_report(
        db: Session, tenant_id: int, start_date: date, end_date: date, branch_id: Optional[int] = None
    ) -> Dict[str, Any]:
        """Ventas pagadas agrupadas por método de pago, por tarifa y por día de checkout"""
        filters = [Transaction.tenant_id == tenant_id, _is_paid_sale(), *_checkout_window(start_date, end_date)]
        if branch_id is not None:
            filters.append(Transaction.branch_id == branch_id)

        total = func.coalesce(func.sum(Transaction.total_amount), 0)
        count = func.count(Transaction.id)

        # Por método de pago
        method = func.coalesce(Transaction.client_payment_method, "Unknown")
        by_method = (
            db.query(method.label("payment_method"), total.label("total_sales"), count.label("transaction_count"))
            .filter(*filters)
            .group_by(method)
            .order_by(total.desc())
            .all()
        )

        # Por tarifa
        rate_name = func.coalesce(Rate.name, "Unspecified Rate")
        by_rate = (
            db.query(
                Transaction.hotel_rate_id.label("rate_id"),
                rate_name.label("rate_name"),
                total.label("total_sales"),
                count.label("transaction_count"),
            )
            .outerjoin(Rate, Rate.id == Transaction.hotel_rate_id)
            .filter(*filters)
            .group_by(Transaction.hotel_rate_id, rate_name)
            .order_by(total.desc())
            .all()
        )

        # Por día de checkout
        day = func.date(Transaction.check_out_time, type_=Date)
        daily = (
            db.query(day.label("sale_date"), total.label("total_sales"), count.label("transaction_count"))
            .filter(*filters)
            .group_by(day)
            .order_by(day.asc())
            .all()
        )

        daily_rows: List[Dict[str, Any]] = [
            {
                "sale_date": row.sale_date,
                "total_sales": quantize_money(row.total_sales),
                "transaction_count": row.transaction_count,
            }
            for row in daily
        ]

        return {
            "start_date": start_date,
            "end_date": end_date,
            "total_sales": quantize_money(sum(row["total_sales"] for row in daily_rows)),
            "total_transactions": sum(row["transaction_count"] for row in daily_rows),
            "by_payment_method": [
                {
                    "payment_method": row.payment_method,
                    "total_sales": quantize_money(row.total_sales),
                    "transaction_count": row.transaction_count,
                }
                for row in by_method
            ],
            "by_rate": [
                {
                    "rate_id": row.rate_id,
                    "rate_name": row.rate_name,
                    "total_sales": quantize_money(row.total_sales),
                    "transaction_count": row.transaction_count,
                }
                for row in by_rate
            ],
            "daily": daily_rows,
        }

    @staticmethod
    def system_overview(db: Session) -> Dict[str, Any]:
        total_tenants = db.query(func.count(Tenant.id)).filter(Tenant.status == EntityStatus.ACTIVE).scalar()
        total_branches = db.query(func.count(Branch.id)).filter(Branch.status == EntityStatus.ACTIVE).scalar()

        users_by_role = {role.value: 0 for role in UserRole}
        rows = (
            db.query(User.role, func.count(User.id))
            .filter(User.status == EntityStatus.ACTIVE)
            .group_by(User.role)
            .all()
        )
        for role, total in rows:
            users_by_role[role.value] = total

        return {
            "total_active_tenants": total_tenants,
            "total_active_branches": total_branches,
            "users_by_role": users_by_role,
        }
