import logging
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Dict, List, Optional
from datetime import date

from django.db import IntegrityError, transaction
from django.db.models import Count, Q, QuerySet, Sum

from ..models import Client, Gig, Invoice
from ..utils import CENT, CurrencyHelper, today_utc
from ..validation import InvalidTransition, ValidationError, format_validation_errors
from .ownership import get_owned_or_raise, require_user

logger = logging.getLogger(__name__)

ZERO = Decimal('0.00')
# Invoice.amount is max_digits=12, decimal_places=2
MAX_AMOUNT = Decimal('1e10')


class InvoiceService:
    VALID_TRANSITIONS = {
        Invoice.Status.DRAFT: [Invoice.Status.SENT, Invoice.Status.PAID],
        Invoice.Status.SENT: [Invoice.Status.PAID],
        # overdue is derived at read time; a stored value only comes from legacy rows
        Invoice.Status.OVERDUE: [Invoice.Status.PAID],
        Invoice.Status.PAID: [],
    }

    @classmethod
    def can_transition(cls, from_status: str, to_status: str) -> bool:
        allowed = cls.VALID_TRANSITIONS.get(from_status, [])
        return to_status in allowed

    @classmethod
    def available_transitions(cls, invoice: Invoice) -> List[str]:
        transitions = []
        for status in cls.VALID_TRANSITIONS.get(invoice.status, []):
            if status == Invoice.Status.SENT and cls._send_blocker(invoice):
                continue
            transitions.append(status.value)
        return transitions

    @staticmethod
    def _send_blocker(invoice: Invoice) -> Optional[str]:
        if invoice.client_id is None:
            return "Invoice must have a client before it can be sent"
        if invoice.amount is None or invoice.amount <= 0:
            return "Invoice amount must be greater than 0 before it can be sent"
        return None

    @staticmethod
    def generate_invoice_number(user, on: Optional[date] = None) -> str:
        """INV-{year}-{MMDD}-{NN}, NN being the next sequence for that day."""
        on = on or today_utc()
        prefix = f"INV-{on.year}-{on.month:02d}{on.day:02d}-"
        existing = Invoice.objects.filter(
            user=user,
            invoice_number__startswith=prefix,
        ).values_list('invoice_number', flat=True)

        highest = 0
        for number in existing:
            suffix = number[len(prefix):]
            if suffix.isdigit():
                highest = max(highest, int(suffix))
        return f"{prefix}{highest + 1:02d}"

    @staticmethod
    def _check_number(value: Any, field: str, errors: Dict[str, List[str]], label: str, allow_zero: bool) -> None:
        try:
            number = Decimal(str(value))
        except InvalidOperation:
            errors[field] = [f'{label} must be a valid number']
            return
        if not number.is_finite() or number < 0 or (number == 0 and not allow_zero):
            errors[field] = [f'{label} must be a non-negative number' if allow_zero else f'{label} must be greater than 0']
        elif number >= MAX_AMOUNT:
            errors[field] = [f'{label} is too large']
        elif number != number.quantize(CENT):
            errors[field] = [f'{label} cannot have more than 2 decimal places']

    @classmethod
    def validate_items(cls, items: List[Dict[str, Any]]) -> Dict[str, List[str]]:
        errors: Dict[str, List[str]] = {}
        for i, item in enumerate(items):
            if not str(item.get('description') or '').strip():
                errors[f'items.{i}.description'] = ['Description is required']
            cls._check_number(item.get('quantity', 1), f'items.{i}.quantity', errors, 'Quantity', allow_zero=False)
            cls._check_number(item.get('rate', 0), f'items.{i}.rate', errors, 'Rate', allow_zero=True)
        return errors

    @staticmethod
    def calculate_line_item(item_data: Dict[str, Any]) -> Dict[str, str]:
        quantity = Decimal(str(item_data.get('quantity', 1))).quantize(CENT, rounding=ROUND_HALF_UP)
        rate = Decimal(str(item_data.get('rate', 0))).quantize(CENT, rounding=ROUND_HALF_UP)
        amount = (quantity * rate).quantize(CENT, rounding=ROUND_HALF_UP)
        return {
            'description': str(item_data.get('description', '')).strip(),
            'quantity': str(quantity),
            'rate': str(rate),
            'amount': str(amount),
        }

    @staticmethod
    def calculate_invoice_total(line_items: List[Dict[str, Any]]) -> Decimal:
        total = ZERO
        for item in line_items:
            total += Decimal(str(item['amount']))
        return total.quantize(CENT, rounding=ROUND_HALF_UP)

    @classmethod
    def _priced_items(cls, items: List[Dict[str, Any]], errors: Dict[str, List[str]]) -> List[Dict[str, str]]:
        """Price validated items, flagging any line or total the amount column cannot hold."""
        line_items = [cls.calculate_line_item(item) for item in items]
        for i, item in enumerate(line_items):
            if Decimal(item['amount']) >= MAX_AMOUNT:
                errors[f'items.{i}.amount'] = ['Line amount is too large']
        if line_items and cls.calculate_invoice_total(line_items) >= MAX_AMOUNT:
            errors['amount'] = ['Invoice total is too large']
        return line_items

    @staticmethod
    def _raise_if_errors(
errors: Dict[str, List[str]]) -> None:
        if errors:
            raise ValidationError(
                message="Invoice validation failed",
                fields=format_validation_errors(errors),
            )

    @staticmethod
    def _check_amount(amount: Any, errors: Dict[str, List[str]]) -> Optional[Decimal]:
        value = CurrencyHelper.validate_amount(amount)
        if value is None or not value.is_finite():
            errors['amount'] = ['Amount must be a valid number']
            return None
        if value < 0:
            errors['amount'] = ['Amount cannot be negative']
            return None
        if value >= MAX_AMOUNT:
            errors['amount'] = ['Amount is too large']
            return None
        return value

    @staticmethod
    def _number_taken(user, invoice_number: str, exclude_id: Optional[int] = None) -> bool:
        qs = Invoice.objects.filter(user=user, invoice_number=invoice_number)
        if exclude_id is not None:
            qs = qs.exclude(id=exclude_id)
        return qs.exists()

    @classmethod
    @transaction.atomic
    def create_invoice(cls, user, data: Dict[str, Any]) -> Invoice:
        require_user(user)
        errors: Dict[str, List[str]] = {}

        gig = None
        if data.get('gig_id') is not None:
            gig = get_owned_or_raise(Gig, data['gig_id'], user)

        client_id = data.get('client_id')
        if client_id is None and gig is not None:
            client_id = gig.client_id
        client = get_owned_or_raise(Client, client_id, user) if client_id is not None else None
        if client is None:
            errors['client_id'] = ['Client is required']

        items = data.get('items') or []
        amount = data.get('amount')
        if gig is not None and gig.fee and not items and amount is None:
            items = [{'description': f"DJ Services: {gig.title}", 'quantity': 1, 'rate': gig.fee}]

        if not items and amount is None:
            errors['amount'] = ['Amount or at least one line item is required']
        item_errors = cls.validate_items(items)
        errors.update(item_errors)
        line_items = [] if item_errors else cls._priced_items(items, errors)
        if not items and amount is not None:
            amount = cls._check_amount(amount, errors)
            if amount is not None and amount <= 0:
                errors['amount'] = ['Amount must be greater than 0']

        issued_date = data.get('issued_date') or today_utc()
        due_date = data.get('due_date')
        if not due_date:
            errors['due_date'] = ['Due date is required']
        elif due_date < issued_date:
            errors['due_date'] = ['Due date cannot be before issue date']

        invoice_number = (data.get('invoice_number') or '').strip()
        if invoice_number and cls._number_taken(user, invoice_number):
            errors['invoice_number'] = ['Invoice number is already in use']

        cls._raise_if_errors(errors)

        if line_items:
            amount = cls.calculate_invoice_total(line_items)

        try:
            with transaction.atomic():
                invoice = Invoice.objects.create(
                    user=user,
                    client=client,
                    gig=gig,
                    invoice_number=invoice_number or cls.generate_invoice_number(user),
                    status=Invoice.Status.DRAFT,
                    issued_date=issued_date,
                    due_date=due_date,
                    amount=amount,
                    items=line_items,
                    notes=data.get('notes') or '',
                )
        except IntegrityError:
            raise ValidationError.for_field('invoice_number', 'Invoice number is already in use')

        logger.info(f"Invoice {invoice.id} ({invoice.invoice_number}) created by user {user.id}")
        return invoice

    @classmethod
    @transaction.atomic
    def update_invoice(cls, invoice_id, user, data: Dict[str, Any]) -> Invoice:
        """
        Partial update. A new `items` sequence replaces the old one entirely
        and recomputes `amount`; status is only changed through update_status.
        """
        invoice = get_owned_or_raise(Invoice, invoice_id, user)
        errors: Dict[str, List[str]] = {}

        if 'client_id' in data:
            if data['client_id'] is None:
                errors['client_id'] = ['Client is required']
            else:
                invoice.client = get_owned_or_raise(Client, data['client_id'], user)

        if 'gig_id' in data:
            invoice.gig = get_owned_or_raise(Gig, data['gig_id'], user) if data['gig_id'] is not None else None

        if 'items' in data:
            items = data['items'] or []
            item_errors = cls.validate_items(items)
            errors.update(item_errors)
            if not items:
                if data.get('amount') is None:
                    errors['amount'] = ['Amount is required when an invoice has no line items']
                else:
                    amount = cls._check_amount(data['amount'], errors)
                    if amount is not None:
                        invoice.amount = amount
                invoice.items = []
            elif not item_errors:
                invoice.items = cls._priced_items(items, errors)
                invoice.amount = cls.calculate_invoice_total(invoice.items)
        elif 'amount' in data:
            if invoice.items:
                errors['amount'] = ['Amount is computed from line items; send the full items list instead']
            else:
                amount = cls._check_amount(data['amount'], errors)
                if amount is not None:
                    invoice.amount = amount

        if data.get('issued_date'):
            invoice.issued_date = data['issued_date']
        if 'due_date' in data:
            if not data['due_date']:
                errors['due_date'] = ['Due date is required']
            else:
                invoice.due_date = data['due_date']
        if 'due_date' not in errors and invoice.due_date < invoice.issued_date:
            errors['due_date'] = ['Due date cannot be before issue date']

        if 'notes' in data:
            invoice.notes = data['notes'] or ''

        invoice_number = (data.get('invoice_number') or '').strip()
        if invoice_number and invoice_number != invoice.invoice_number:
            if cls._number_taken(user, invoice_number, exclude_id=invoice.id):
                errors['invoice_number'] = ['Invoice number is already in use']
            invoice.invoice_number = invoice_number

        cls._raise_if_errors(errors)
        invoice.save()

        logger.info(f"Invoice {invoice.id} updated by user {user.id}")
        return invoice

    @classmethod
    @transaction.atomic
    def update_status(cls, invoice_id, user, new_status: str) -> Invoice:
        invoice = get_owned_or_raise(Invoice, invoice_id, user)

        if new_status not in Invoice.Status.values:
            raise ValidationError.for_field(
                'status',
                f"Status must be one of: {', '.join(Invoice.Status.values)}",
            )

        old_status = invoice.status
        if not cls.can_transition(old_status, new_status):
            raise InvalidTransition(f"Cannot transition from '{old_status}' to '{new_status}'")

        if new_status == Invoice.Status.SENT:
            blocker = cls._send_blocker(invoice)
            if blocker:
                raise InvalidTransition(blocker)

        invoice.status = new_status
        invoice.save(update_fields=['status', 'updated_at'])

        logger.info(f"Invoice {invoice.id} transitioned from {old_status} to {new_status}")
        return invoice

    @staticmethod
    def get_invoice(invoice_id, user) -> Invoice:
        return get_owned_or_raise(Invoice, invoice_id, user)

    @staticmethod
    @transaction.atomic
    def delete_invoice(invoice_id, user) -> bool:
        invoice = get_owned_or_raise(Invoice, invoice_id, user)
        invoice.delete()
        logger.info(f"Invoice {invoice_id} deleted by user {user.id}")
        return True

    @staticmethod
    def list_invoices(user) -> QuerySet:
        require_user(user)
        return Invoice.objects.owned_by(user).select_related('client').order_by('-issued_date', '-id')

    @staticmethod
    def list_by_status(user, status: str) -> QuerySet:
        """Filter on the stored status only; see list_overdue for the derived view."""
        require_user(user)
        if status not in Invoice.Status.values:
            raise ValidationError.for_field(
                'status',
                f"Status must be one of: {', '.join(Invoice.Status.values)}",
            )
        return Invoice.objects.owned_by(user).filter(status=status).order_by('-issued_date', '-id')

    @staticmethod
    def overdue_filter() -> Q:
        return ~Q(status=Invoice.Status.PAID) & Q(due_date__lt=today_utc())

    @classmethod
    def list_overdue(cls, user) -> QuerySet:
        require_user(user)
        return Invoice.objects.owned_by(user).filter(cls.overdue_filter()).order_by('due_date', 'id')

    @staticmethod
    def recent_invoices(user, limit: int = 5) -> QuerySet:
        require_user(user)
        if limit < 1:
            raise ValidationError.for_field('limit', 'Limit must be at least 1', code='FIELD_OUT_OF_RANGE')
        return Invoice.objects.owned_by(user).order_by('-issued_date', '-id')[:limit]

    @classmethod
    def aggregate_totals(cls, user) -> Dict[str, Any]:
        """
        Dashboard figures, recomputed on every call.

        paid/pending/draft/sent figures use the stored status. overdue figures
        use the derived condition, so a sent invoice past its due date is
        counted in both pending_total and overdue_total.
        """
        require_user(user)
        Status = Invoice.Status
        totals = Invoice.objects.owned_by(user).aggregate(
            paid_total=Sum('amount', filter=Q(status=Status.PAID)),
            pending_total=Sum('amount', filter=Q(status=Status.SENT)),
            overdue_total=Sum('amount', filter=cls.overdue_filter()),
            draft_count=Count('id', filter=Q(status=Status.DRAFT)),
            sent_count=Count('id', filter=Q(status=Status.SENT)),
            paid_count=Count('id', filter=Q(status=Status.PAID)),
            overdue_count=Count('id', filter=cls.overdue_filter()),
        )

        for key in ('paid_total', 'pending_total', 'overdue_total'):
            totals[key] = CurrencyHelper.to_money(totals[key] or ZERO)
        return totals

    @staticmethod
    def per_client_totals(user, client_id) -> Dict[str, Any]:
        client = get_owned_or_raise(Client, client_id, user)

        gig_count = Gig.objects.owned_by(user).filter(
            Q(client=client) | Q(invoices__client=client)
        ).distinct().count()
        total_paid = Invoice.objects.owned_by(user).filter(
            client=client,
            status=Invoice.Status.PAID,
        ).aggregate(total=Sum('amount'))['total'] or ZERO

        return {
            'client_id': client.id,
            'gig_count': gig_count,
            'total_paid': CurrencyHelper.to_money(total_paid),
        }
