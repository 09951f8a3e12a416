"""
보고서 엔진

General Ledger, Trial Balance, Balance Sheet, Profit & Loss.
모두 LedgerStore.query 시퀀스를 스트리밍으로 접어(fold) 계산하는 읽기 전용 연산.
LedgerEntry를 생성/수정/취소하지 않는다.

잔액 부호:
- ASSET/EXPENSE: 차변 - 대변
- LIABILITY/EQUITY/INCOME: 대변 - 차변
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import AsyncIterator

from core.config.loader import LedgerConfig
from core.ledger.accounts import Account, ChartOfAccounts
from core.ledger.entry import LedgerEntry, LedgerFilter
from core.ledger.money import Money
from core.ledger.store import LedgerStore
from core.ledger.types import AccountType, OrderBy

logger = logging.getLogger(__name__)

PROVISIONAL_PROFIT_LABEL = "Provisional Profit / Loss"


@dataclass(frozen=True)
class GeneralLedgerRow:
    entry: LedgerEntry
    balance: Money  # 이 라인까지의 누적 잔액 (차변 - 대변)


@dataclass
class GeneralLedger:
    account: str
    from_date: date | None
    to_date: date | None
    opening_balance: Money
    rows: list[GeneralLedgerRow]
    total_debit: Money
    total_credit: Money

    @property
    def closing_balance(self) -> Money:
        return self.rows[-1].balance if self.rows else self.opening_balance


@dataclass(frozen=True)
class TrialBalanceRow:
    account: str
    account_type: AccountType
    debit: Money
    credit: Money

    @property
    def balance(self) -> Money:
        """차변 - 대변"""
        return self.debit - self.credit


@dataclass
class TrialBalance:
    as_of: date
    rows: list[TrialBalanceRow]
    total_debit: Money
    total_credit: Money

    @property
    def is_balanced(self) -> bool:
        """차변 총계 == 대변 총계 (위반은 Posting 버그)"""
        return self.total_debit == self.total_credit


@dataclass(frozen=True)
class StatementRow:
    """재무제표 라인 (그룹 계정은 하위 합계)"""

    account: str
    account_type: AccountType
    depth: int
    is_group: bool
    balance: Money


@dataclass
class BalanceSheet:
    as_of: date
    rows: list[StatementRow]
    total_assets: Money
    total_liabilities: Money
    total_equity: Money  # provisional_profit 포함
    provisional_profit: Money
    residual: Money  # 자산 - (부채 + 자본)
    tolerance: Money

    @property
    def is_balanced(self) -> bool:
        return abs(self.residual) <= self.tolerance


@dataclass
class ProfitAndLoss:
    from_date: date | None
    to_date: date | None
    rows: list[StatementRow]
    total_income: Money
    total_expense: Money

    @property
    def net_profit(self) -> Money:
        return self.total_income - self.total_expense


@dataclass
class _AccountTotals:
    debit: Money
    credit: Money


def normal_balance(account_type: AccountType, debit: Money, credit: Money) -> Money:
    """계정 유형별 정상 잔액"""
    if account_type.is_debit_normal:
        return debit - credit
    return credit - debit


class ReportEngine:
    """보고서 엔진

    Args:
        store: Ledger 저장소 (조회만 사용)
        chart: 계정과목표
        config: Ledger 설정 (precision, balance_tolerance)
    """

    def __init__(
        self,
        store: LedgerStore,
        chart: ChartOfAccounts,
        config: LedgerConfig | None = None,
    ):
        self.store = store
        self.chart = chart
        self.config = config or LedgerConfig()

    def _zero(self) -> Money:
        return Money.zero(self.config.precision)

    async def _fold_totals(self, where: LedgerFilter) -> dict[str, _AccountTotals]:
        """계정별 차변/대변 합계 (스트리밍)"""
        totals: dict[str, _AccountTotals] = {}
        async for entry in self.store.query(where, OrderBy.INSERTION):
            bucket = totals.get(entry.account)
            if bucket is None:
                bucket = totals[entry.account] = _AccountTotals(self._zero(), self._zero())
            bucket.debit = bucket.debit + entry.debit
            bucket.credit = bucket.credit + entry.credit
        return totals

    # -------------------------------------------------------------------------
    # General Ledger
    # -------------------------------------------------------------------------

    async def iter_general_ledger(
        self,
        account: str,
        from_date: date | None = None,
        to_date: date | None = None,
        include_reverted: bool = False,
    ) -> AsyncIterator[GeneralLedgerRow]:
        """계정 원장 라인 (시간순, 누적 잔액 포함)

        시작 잔액은 from_date 이전 entry 전체의 합 (이전 이력이 없으면 0).
        그룹 계정이면 하위 leaf 계정 전체를 포함.
        """
        accounts = tuple(self.chart.leaves_under(account))
        reverted = None if include_reverted else False
        opening = await self.opening_balance(accounts, from_date, reverted)
        async for row in self._ledger_rows(accounts, from_date, to_date, reverted, opening):
            yield row

    async def _ledger_rows(
        self,
        accounts: tuple[str, ...],
        from_date: date | None,
        to_date: date | None,
        reverted: bool | None,
        balance: Money,
    ) -> AsyncIterator[GeneralLedgerRow]:
        where = LedgerFilter(
            accounts=accounts,
            from_date=from_date,
            to_date=to_date,
            reverted=reverted,
        )
        async for entry in self.store.query(where, OrderBy.CHRONOLOGICAL):
            balance = balance + entry.debit - entry.credit
            yield GeneralLedgerRow(entry=entry, balance=balance)

    async def opening_balance(
        self,
        accounts: tuple[str, ...],
        before: date | None,
        reverted: bool | None = False,
    ) -> Money:
        """before 이전 entry의 차변 - 대변 합계"""
        balance = self._zero()
        if before is None:
            return balance
        where = LedgerFilter(accounts=accounts, before_date=before, reverted=reverted)
        async for entry in self.store.query(where, OrderBy.INSERTION):
            balance = balance + entry.debit - entry.credit
        return balance

    async def general_ledger(
        self,
        account: str,
        from_date: date | None = None,
        to_date: date | None = None,
        include_reverted: bool = False,
    ) -> GeneralLedger:
        """General Ledger 보고서"""
        accounts = tuple(self.chart.leaves_under(account))
        reverted = None if include_reverted else False
        opening = await self.opening_balance(accounts, from_date, reverted)

        rows: list[GeneralLedgerRow] = []
        total_debit = self._zero()
        total_credit = self._zero()
        async for row in self._ledger_rows(accounts, from_date, to_date, reverted, opening):
            rows.append(row)
            total_debit = total_debit + row.entry.debit
            total_credit = total_credit + row.entry.credit

        return GeneralLedger(
            account=account,
            from_date=from_date,
            to_date=to_date,
            opening_balance=opening,
            rows=rows,
            total_debit=total_debit,
            total_credit=total_credit,
        )

    # -------------------------------------------------------------------------
    # Trial Balance
    # -------------------------------------------------------------------------

    async def trial_balance(self, as_of: date, include_zero: bool = False) -> TrialBalance:
        """시산표

        as_of까지의 미취소 entry를 leaf 계정별로 합산.
        차변 총계 != 대변 총계면 Posting 버그이므로 ERROR 로그.
        """
        totals = await self._fold_totals(LedgerFilter(to_date=as_of, reverted=False))

        rows: list[TrialBalanceRow] = []
        for account in self.chart.walk():
            if account.is_group:
                continue
            bucket = totals.pop(account.name, None)
            if bucket is None and not include_zero:
                continue
            rows.append(TrialBalanceRow(
                account=account.name,
                account_type=account.account_type,
                debit=bucket.debit if bucket else self._zero(),
                credit=bucket.credit if bucket else self._zero(),
            ))

        if totals:
            # 계정과목표에 없는 계정의 entry - 합계에는 포함
            logger.warning(f"Entries for accounts missing from chart: {sorted(totals)}")

        report = TrialBalance(
            as_of=as_of,
            rows=rows,
            total_debit=Money.total((r.debit for r in rows), self.config.precision)
            + Money.total((b.debit for b in totals.values()), self.config.precision),
            total_credit=Money.total((r.credit for r in rows), self.config.precision)
            + Money.total((b.credit for b in totals.values()), self.config.precision),
        )

        if not report.is_balanced:
            logger.error(
                f"Trial balance does not balance as of {as_of}: "
                f"debit={report.total_debit} credit={report.total_credit}"
            )
        return report

    # -------------------------------------------------------------------------
    # 재무제표 공통
    # -------------------------------------------------------------------------

    def _statement_rows(
        self,
        leaf_balances: dict[str, Money],
        account_types: set[AccountType],
        level: int | None,
    ) -> list[StatementRow]:
        """leaf 잔액을 계층으로 집계하여 트리 순서 라인 생성

        level이 주어지면 depth <= level인 계정만 표시 (하위는 상위에 합산됨).
        """
        group_totals: dict[str, Money] = {}

        def subtotal(account: Account) -> Money:
            if not account.is_group:
                return leaf_balances.get(account.name, self._zero())
            total = self._zero()
            for child in self.chart.children(account.name):
                total = total + subtotal(child)
            group_totals[account.name] = total
            return total

        rows: list[StatementRow] = []
        for root in self.chart.children(None):
            if root.account_type not in account_types:
                continue
            subtotal(root)
            for account in self.chart.walk(root.name):
                depth = self.chart.depth(account.name)
                if level is not None and depth > level:
                    continue
                balance = (
                    group_totals[account.name]
                    if account.is_group
                    else leaf_balances.get(account.name, self._zero())
                )
                rows.append(StatementRow(
                    account=account.name,
                    account_type=account.account_type,
                    depth=depth,
                    is_group=account.is_group,
                    balance=balance,
                ))
        return rows

    async def _leaf_balances(self, where: LedgerFilter) -> dict[str, Money]:
        totals = await self._fold_totals(where)
        balances: dict[str, Money] = {}
        for name, bucket in totals.items():
            account = self.chart.get(name)
            if account is None:
                logger.warning(f"Skipping entries for unknown account: {name}")
                continue
            balances[name] = normal_balance(account.account_type, bucket.debit, bucket.credit)
        return balances

    def _type_total(self, balances: dict[str, Money], account_type: AccountType) -> Money:
        return Money.total(
            (
                amount
                for name, amount in balances.items()
                if self.chart.get(name).account_type == account_type
            ),
            self.config.precision,
        )

    # -------------------------------------------------------------------------
    # Balance Sheet
    # -------------------------------------------------------------------------

    async def balance_sheet(self, as_of: date, level: int | None = None) -> BalanceSheet:
        """재무상태표

        자산 = 부채 + 자본 (미마감 손익은 자본의 Provisional Profit / Loss).
        잔차가 허용 범위를 넘으면 흡수하지 않고 residual로 보고.
        """
        balances = await self._leaf_balances(LedgerFilter(to_date=as_of, reverted=False))

        total_assets = self._type_total(balances, AccountType.ASSET)
        total_liabilities = self._type_total(balances, AccountType.LIABILITY)
        provisional_profit = (
            self._type_total(balances, AccountType.INCOME)
            - self._type_total(balances, AccountType.EXPENSE)
        )
        total_equity = self._type_total(balances, AccountType.EQUITY) + provisional_profit

        rows = self._statement_rows(
            balances,
            {AccountType.ASSET, AccountType.LIABILITY, AccountType.EQUITY},
            level,
        )
        # 미마감 손익 라인은 자본 하위 (depth 1). level 0이면 total_equity에만 반영
        if level is None or level >= 1:
            rows.append(StatementRow(
                account=PROVISIONAL_PROFIT_LABEL,
                account_type=AccountType.EQUITY,
                depth=1,
                is_group=False,
                balance=provisional_profit,
            ))

        report = BalanceSheet(
            as_of=as_of,
            rows=rows,
            total_assets=total_assets,
            total_liabilities=total_liabilities,
            total_equity=total_equity,
            provisional_profit=provisional_profit,
            residual=total_assets - (total_liabilities + total_equity),
            tolerance=Money.of(
                self.config.balance_tolerance, self.config.precision, self.config.rounding
            ),
        )

        if not report.is_balanced:
            logger.error(f"Balance sheet residual as of {as_of}: {report.residual}")
        return report

    # -------------------------------------------------------------------------
    # Profit & Loss
    # -------------------------------------------------------------------------

    async def profit_and_loss(
        self,
        from_date: date | None = None,
        to_date: date | None = None,
        level: int | None = None,
    ) -> ProfitAndLoss:
        """손익계산서 (순이익 = 수익 합계 - 비용 합계)"""
        balances = await self._leaf_balances(
            LedgerFilter(from_date=from_date, to_date=to_date, reverted=False)
        )
        return ProfitAndLoss(
            from_date=from_date,
            to_date=to_date,
            rows=self._statement_rows(balances, {AccountType.INCOME, AccountType.EXPENSE}, level),
            total_income=self._type_total(balances, AccountType.INCOME),
            total_expense=self._type_total(balances, AccountType.EXPENSE),
        )

    # -------------------------------------------------------------------------
    # 미결제 잔액
    # -------------------------------------------------------------------------

    async def outstanding(
        self,
        reference_type: str,
        reference_name: str,
        grand_total: Money,
    ) -> Money:
        """미결제 금액 = grand_total - 유효 결제 배분 합계"""
        settled = await self.store.settled_amount(reference_type, reference_name)
        return grand_total - settled
