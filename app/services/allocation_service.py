"""
Monthly revenue allocation from the CMS ledger to partner settlements.

A run for one month executes in a single transaction: every partner
aggregate and detail line for the month commits together or not at all.
Runs for the same month are serialized through the month's AllocationRun row.
"""
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session
from app.core.config import settings
from app.core.exceptions import SettlementLockedError
from app.core.utils import validate_year_month, month_start, to_decimal, quantize_money, utcnow
from app.models.distributor import MonthlySettlement
from app.models.notification import NotificationType
from app.models.partner import PartnerTrack
from app.models.partner_settlement import (
    PartnerSettlement, PartnerSettlementDetail, SettlementStatus, AllocationRun
)
from app.services.contract_service import active_contracts_for
from app.services.notification_service import emit_safely

logger = logging.getLogger(__name__)


@dataclass
class AllocationResult:
    """Outcome of one allocation run."""
    year_month: str
    created: List[int] = field(default_factory=list)  # partner ids with a new settlement
    updated: List[int] = field(default_factory=list)  # partner ids whose settlement was recomputed
    unallocated_net_revenue: Decimal = Decimal(0)
    
    @property
    def allocated_partners(self) -> int:
        return len(self.created) + len(self.updated)


@dataclass
class _PartnerTotals:
    """Running sums for one partner while walking the ledger."""
    gross: Decimal = Decimal(0)
    net: Decimal = Decimal(0)
    share: Decimal = Decimal(0)
    streams: int = 0
    downloads: int = 0
    lines: List[PartnerSettlementDetail] = field(default_factory=list)
    
    def add(self, row: MonthlySettlement, contract: PartnerTrack) -> None:
        gross = to_decimal(row.gross_revenue)
        net = to_decimal(row.net_revenue)
        share_rate = to_decimal(contract.share_rate)
        share = quantize_money(net * share_rate / Decimal(100))
        
        self.gross += gross
        self.net += net
        self.share += share
        self.streams += row.stream_count or 0
        self.downloads += row.download_count or 0
        self.lines.append(PartnerSettlementDetail(
            track_id=row.track_id,
            distributor_id=row.distributor_id,
            source_settlement_id=row.id,
            gross_revenue=gross,
            net_revenue=net,
            share_rate=share_rate,
            partner_share=share,
            stream_count=row.stream_count or 0,
            download_count=row.download_count or 0
        ))


def allocate(
    db: Session,
    year_month: str,
    force: bool = False,
    run_by: Optional[int] = None,
    management_fee_rate: Optional[Decimal] = None
) -> AllocationResult:
    """
    Allocate one month of ledger revenue to partners.
    
    Raises SettlementLockedError (and rolls back the whole month) when a
    partner's settlement for the month is already confirmed or paid, unless
    force is set; forced runs recompute amounts but keep the status.
    """
    validate_year_month(year_month)
    fee_rate = settings.MANAGEMENT_FEE_RATE if management_fee_rate is None else to_decimal(management_fee_rate)
    
    logger.info(f"Allocating settlements for {year_month} (force={force})")
    try:
        run = _lock_month(db, year_month)
        
        ledger_rows = db.query(MonthlySettlement).filter(
            MonthlySettlement.year_month == year_month,
            MonthlySettlement.track_id.isnot(None)
        ).order_by(MonthlySettlement.id).all()
        
        if not ledger_rows:
            db.rollback()
            logger.info(f"No ledger rows for {year_month}; nothing to allocate")
            return AllocationResult(year_month=year_month)
        
        result = AllocationResult(year_month=year_month)
        totals = _collect_partner_totals(db, year_month, ledger_rows, result)
        _write_settlements(db, year_month, totals, fee_rate, force, run_by, result)
        
        run.allocated_partners = result.allocated_partners
        run.last_run_at = utcnow()
        run.last_run_by = run_by
        db.commit()
    except Exception:
        db.rollback()
        raise
    
    if result.unallocated_net_revenue:
        logger.warning(
            f"{year_month}: net revenue {result.unallocated_net_revenue} has no active contract and stays unallocated"
        )
    logger.info(
        f"Allocated {year_month}: {len(result.created)} created, {len(result.updated)} updated"
    )
    return result


def _lock_month(db: Session, year_month: str) -> AllocationRun:
    """Fetch the month's run row with a row lock, creating it on first use."""
    query = db.query(AllocationRun).filter(AllocationRun.year_month == year_month)
    run = query.with_for_update().first()
    if run is not None:
        return run
    
    try:
        with db.begin_nested():
            run = AllocationRun(year_month=year_month, allocated_partners=0)
            db.add(run)
        return run
    except (IntegrityError, OperationalError) as e:
        # Another first run inserted the row (duplicate key, or an InnoDB
        # deadlock that aborted this transaction). Nothing is written yet.
        logger.info(f"Run row for {year_month} created concurrently; retrying lock ({type(e).__name__})")
        db.rollback()
        return query.with_for_update().one()


def _collect_partner_totals(
    db: Session,
    year_month: str,
    ledger_rows: List[MonthlySettlement],
    result: AllocationResult
) -> Dict[int, _PartnerTotals]:
    as_of = month_start(year_month)
    contracts_by_track: Dict[int, List[PartnerTrack]] = {}
    totals: Dict[int, _PartnerTotals] = {}
    
    for row in ledger_rows:
        if row.track_id not in contracts_by_track:
            contracts_by_track[row.track_id] = active_contracts_for(db, row.track_id, as_of)
        contracts = contracts_by_track[row.track_id]
        
        if not contracts:
            result.unallocated_net_revenue += to_decimal(row.net_revenue)
            continue
        
        for contract in contracts:
            totals.setdefault(contract.partner_id, _PartnerTotals()).add(row, contract)
    
    return totals


def _write_settlements(
    db: Session,
    year_month: str,
    totals: Dict[int, _PartnerTotals],
    fee_rate: Decimal,
    force: bool,
    run_by: Optional[int],
    result: AllocationResult
) -> None:
    existing = {
        s.partner_id: s
        for s in db.query(PartnerSettlement).filter(
            PartnerSettlement.year_month == year_month
        ).with_for_update().all()
    }
    
    # Check every lock before writing anything, including partners whose
    # contract no longer covers the month.
    if not force:
        for partner_id in sorted(existing):
            settlement = existing[partner_id]
            if settlement.status != SettlementStatus.PENDING:
                logger.warning(
                    f"Allocation for {year_month} blocked: partner {partner_id} settlement is {settlement.status.value}"
                )
                raise SettlementLockedError(partner_id, year_month, settlement.status.value)
    
    for partner_id in sorted(set(totals) | set(existing)):
        # Partners without a covering contract this run are recomputed to zero.
        partner_totals = totals.get(partner_id) or _PartnerTotals()
        settlement = existing.get(partner_id)
        is_new = settlement is None
        
        if is_new:
            settlement = PartnerSettlement(
                partner_id=partner_id,
                year_month=year_month,
                status=SettlementStatus.PENDING,
                created_by=run_by
            )
            db.add(settlement)
        else:
            settlement.details.clear()
            db.flush()
            if partner_id not in totals:
                logger.info(f"{year_month}: partner {partner_id} has no covering contract; settlement reset to zero")
        
        settlement.total_gross_revenue = partner_totals.gross
        settlement.total_net_revenue = partner_totals.net
        settlement.partner_share = partner_totals.share
        settlement.management_fee = quantize_money(partner_totals.share * fee_rate)
        settlement.total_streams = partner_totals.streams
        settlement.total_downloads = partner_totals.downloads
        settlement.details.extend(partner_totals.lines)
        db.flush()
        
        if is_new:
            result.created.append(partner_id)
            emit_safely(
                db,
                settlement,
                NotificationType.SETTLEMENT_READY,
                f"{year_month} settlement is ready",
                f"{year_month} settlement amount: {partner_totals.share:,.0f} {settings.DEFAULT_CURRENCY}"
            )
        else:
            result.updated.append(partner_id)
