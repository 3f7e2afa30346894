"""
Stock arithmetic for lab consumables.

Stock is never stored: it is the running sum of additions minus removals over
an item's transaction ledger.
"""
from django.db.models import Sum, Count, Q, Value
from django.db.models.functions import Coalesce, TruncDate

from .models import InventoryItem, InventoryTransaction

ADDITION = InventoryTransaction.TransactionType.ADDITION
REMOVAL = InventoryTransaction.TransactionType.REMOVAL

DAILY_SUMMARY_DAYS = 90


class InsufficientStock(Exception):
    def __init__(self, available):
        self.available = available
        super().__init__(f"Insufficient stock. Available: {available}")


def _ledger_totals():
    return {
        'total_additions': Coalesce(Sum('transactions__quantity', filter=Q(transactions__transaction_type=ADDITION)), Value(0)),
        'total_issues': Coalesce(Sum('transactions__quantity', filter=Q(transactions__transaction_type=REMOVAL)), Value(0)),
    }


def current_stock(item):
    totals = InventoryTransaction.objects.filter(item=item).aggregate(
        additions=Coalesce(Sum('quantity', filter=Q(transaction_type=ADDITION)), Value(0)),
        removals=Coalesce(Sum('quantity', filter=Q(transaction_type=REMOVAL)), Value(0)),
    )
    return totals['additions'] - totals['removals']


def record_transaction(item, transaction_type, quantity, date, remarks=''):
    """
    Append to the ledger. Removals may not take stock below zero.
    """
    if transaction_type == REMOVAL:
        available = current_stock(item)
        if quantity > available:
            raise InsufficientStock(available)

    return InventoryTransaction.objects.create(
        item=item,
        item_name=item.item_name,
        quantity=quantity,
        transaction_type=transaction_type,
        date=date,
        remarks=remarks or '',
    )


def stock_levels(with_totals=False):
    items = InventoryItem.objects.annotate(**_ledger_totals()).order_by('item_name')
    levels = []
    for item in items:
        row = {
            'itemId': str(item.id),
            'itemIdCode': item.item_code,
            'itemName': item.item_name,
            'description': item.description,
            'currentStock': item.total_additions - item.total_issues,
        }
        if with_totals:
            row['totalAdditions'] = item.total_additions
            row['totalIssues'] = item.total_issues
        levels.append(row)
    return levels


def daily_summary(limit=DAILY_SUMMARY_DAYS):
    """
    Per day (newest first), per item addition/issue totals.
    """
    rows = (
        InventoryTransaction.objects
        .annotate(day=TruncDate('date'))
        .values('day', 'item_id', 'item_name')
        .annotate(
            total_additions=Coalesce(Sum('quantity', filter=Q(transaction_type=ADDITION)), Value(0)),
            total_issues=Coalesce(Sum('quantity', filter=Q(transaction_type=REMOVAL)), Value(0)),
            transaction_count=Count('id'),
        )
        .order_by('-day', 'item_name')
    )

    days = {}
    for row in rows:
        key = row['day'].isoformat()
        if key not in days:
            if len(days) >= limit:
                break
            days[key] = {
                'date': key,
                'items': [],
                'dayTotalAdditions': 0,
                'dayTotalIssues': 0,
                'dayTransactionCount': 0,
            }
        day = days[key]
        day['items'].append({
            'itemId': str(row['item_id']),
            'itemName': row['item_name'],
            'totalAdditions': row['total_additions'],
            'totalIssues': row['total_issues'],
            'transactionCount': row['transaction_count'],
            'netChange': row['total_additions'] - row['total_issues'],
        })
        day['dayTotalAdditions'] += row['total_additions']
        day['dayTotalIssues'] += row['total_issues']
        day['dayTransactionCount'] += row['transaction_count']

    for day in days.values():
        day['dayNetChange'] = day['dayTotalAdditions'] - day['dayTotalIssues']
    return list(days.values())
