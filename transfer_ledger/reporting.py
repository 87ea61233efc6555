"""
Reporting Engine Module

Dashboard and statement figures derived from transfers: period summary,
monthly activity, status distribution, commissions per debit account,
per-client balances and client statements. Every figure is recomputed from
the stored transfers; nothing here is persisted.
"""

from decimal import Decimal
from datetime import datetime
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .aggregation import BalanceSummary, aggregate, aggregate_for_client
from .clients import Client, ClientManager
from .companies import Company, CompanyManager
from .date_window import DateWindow
from .ledger import TransferManager
from .linkage import LinkageIndex
from .transfers import TransferRecord, TransferStatus, TransferType


@dataclass
class MonthlyActivity:
    """Completed volume of one calendar month"""
    month: str  # YYYY-MM
    incoming: Decimal = Decimal('0')
    outgoing: Decimal = Decimal('0')
    commissions: Decimal = Decimal('0')

    def to_dict(self) -> Dict[str, str]:
        return {
            "month": self.month,
            "incoming": str(self.incoming),
            "outgoing": str(self.outgoing),
            "commissions": str(self.commissions)
        }


@dataclass
class AccountCommissions:
    """Commission earned on outgoing transfers debiting one account"""
    company: Company
    total_commissions: Decimal = Decimal('0')
    transfer_count: int = 0
    last_transfer_date: Optional[datetime] = None


@dataclass
class ClientBalance:
    client: Client
    summary: BalanceSummary


@dataclass
class ParentBalance:
    """Completed incoming transfer with what is left to disburse"""
    transfer: TransferRecord
    remaining_balance: Decimal
    children: List[TransferRecord] = field(default_factory=list)


@dataclass
class ClientStatement:
    client: Client
    window: DateWindow
    summary: BalanceSummary
    transfers: List[TransferRecord]
    incoming: List[ParentBalance]


class ReportingEngine:
    """
    Read-only aggregates for dashboards, client views and statements
    """

    def __init__(self, transfer_manager: TransferManager, client_manager: ClientManager,
                 company_manager: CompanyManager, recent_limit: int = 10):
        self.transfer_manager = transfer_manager
        self.client_manager = client_manager
        self.company_manager = company_manager
        self.recent_limit = recent_limit

    def _window(self, window: Optional[DateWindow]) -> DateWindow:
        return window if window is not None else DateWindow.all_time(self.transfer_manager.tz)

    def summary(self, window: Optional[DateWindow] = None) -> BalanceSummary:
        window = self._window(window)
        return aggregate(self.transfer_manager.list_transfers(window=window))

    def status_distribution(self, window: Optional[DateWindow] = None) -> Dict[str, int]:
        """Transfer count per status, zero counts included"""
        counts = {status.value: 0 for status in TransferStatus}
        for transfer in self.transfer_manager.list_transfers(window=self._window(window)):
            counts[transfer.status.value] += 1
        return counts

    def monthly_activity(self, window: Optional[DateWindow] = None) -> List[MonthlyActivity]:
        """Completed volume per month, oldest month first"""
        window = self._window(window)
        zone = window.tzinfo
        months: Dict[str, MonthlyActivity] = {}

        for transfer in self.transfer_manager.list_transfers(window=window):
            if transfer.status != TransferStatus.COMPLETED:
                continue
            key = transfer.created_at.astimezone(zone).strftime("%Y-%m")
            activity = months.setdefault(key, MonthlyActivity(month=key))
            if transfer.transfer_type == TransferType.INCOMING:
                activity.incoming += transfer.net_amount
            else:
                activity.outgoing += transfer.net_amount
                activity.commissions += transfer.commission_amount

        return [months[key] for key in sorted(months)]

    def commissions_by_account(self, window: Optional[DateWindow] = None) -> List[AccountCommissions]:
        """
        Commission earned per debit account, highest total first

        Only completed outgoing transfers with a non-zero commission count.
        """
        grouped: Dict[str, AccountCommissions] = {}
        transfers = self.transfer_manager.list_transfers(
            window=self._window(window), status=TransferStatus.COMPLETED
        )

        for transfer in transfers:
            if transfer.transfer_type != TransferType.OUTGOING or transfer.commission_amount <= 0:
                continue
            entry = grouped.get(transfer.debit_account_id)
            if entry is None:
                company = self.company_manager.get_company(transfer.debit_account_id)
                if company is None:
                    continue
                entry = grouped[transfer.debit_account_id] = AccountCommissions(company=company)
            entry.total_commissions += transfer.commission_amount
            entry.transfer_count += 1
            if entry.last_transfer_date is None or transfer.created_at > entry.last_transfer_date:
                entry.last_transfer_date = transfer.created_at

        return sorted(grouped.values(), key=lambda e: e.total_commissions, reverse=True)

    def client_balances(self, window: Optional[DateWindow] = None) -> List[ClientBalance]:
        """Every client with its balance over the window"""
        transfers = self.transfer_manager.list_transfers(
            window=self._window(window), status=TransferStatus.COMPLETED
        )
        return [
            ClientBalance(client=client, summary=aggregate_for_client(transfers, client.id))
            for client in self.client_manager.list_clients()
        ]

    def client_statement(self, client_id: str,
                         window: Optional[DateWindow] = None) -> ClientStatement:
        """
        Client balance, transfers and open incoming funds over a window

        Remaining balances account for every linked transfer of the client,
        including ones dated outside the window.
        """
        window = self._window(window)
        client = self.client_manager.require_client(client_id)
        all_transfers = self.transfer_manager.list_transfers(client_id=client_id)
        index = LinkageIndex(all_transfers)
        in_window = window.filter(all_transfers)

        incoming = [
            ParentBalance(
                transfer=transfer,
                remaining_balance=index.remaining_balance(transfer),
                children=index.children_of(transfer.id)
            )
            for transfer in in_window
            if transfer.transfer_type == TransferType.INCOMING and transfer.is_completed
        ]

        return ClientStatement(
            client=client,
            window=window,
            summary=aggregate(in_window),
            transfers=in_window,
            incoming=incoming
        )

    def dashboard(self, window: Optional[DateWindow] = None) -> Dict[str, Any]:
        """Everything the overview page shows, in one pass per figure"""
        window = self._window(window)
        transfers = self.transfer_manager.list_transfers(window=window)
        return {
            "window": window,
            "label": window.label(),
            "summary": aggregate(transfers),
            "status_distribution": self.status_distribution(window),
            "monthly_activity": self.monthly_activity(window),
            "recent_transfers": transfers[:self.recent_limit]
        }
