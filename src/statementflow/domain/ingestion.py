"""Statement ingestion domain service."""

from pathlib import Path
from typing import Any, Optional, Sequence

from statementflow.database.base import Database
from statementflow.domain.categorization import CategorizationEngine
from statementflow.domain.entities import (
    Account,
    Direction,
    NewTransaction,
    ParsedTransaction,
    RawTransaction,
)
from statementflow.domain.errors import NotFoundError, account_not_found
from statementflow.domain.hashing import transaction_hash
from statementflow.domain.normalizer import clean_description
from statementflow.domain.transfers import TransferDetector
from statementflow.logger import get_logger
from statementflow.parsers.base import decode_content
from statementflow.parsers.registry import AUTO, resolve_parser

logger = get_logger(__name__)


def normalize_for_import(parsed: ParsedTransaction) -> RawTransaction:
    """Turn a parser's unsigned amount and direction into a signed amount.

    Expenses become negative, income stays positive.
    """
    amount = abs(parsed.amount)
    if parsed.direction == Direction.EXPENSE:
        amount = -amount
    return RawTransaction(
        date=parsed.date,
        description_raw=parsed.description,
        amount=amount,
        external_id=parsed.external_id,
        extra=dict(parsed.extra),
    )


class IngestionService:
    """Service for importing statement transactions."""

    def __init__(
        self,
        db: Database,
        engine: Optional[CategorizationEngine] = None,
        transfer_detector: Optional[TransferDetector] = None,
    ):
        """Initialize ingestion service.

        Args:
            db: Database instance
            engine: Categorization engine; defaults to one without an AI tier
            transfer_detector: Transfer detector run after each import
        """
        self.db = db
        self.engine = engine or CategorizationEngine(db)
        self.transfer_detector = transfer_detector or TransferDetector(db)

    def import_batch(
        self, user_id: str, account_id: int, transactions: Sequence[RawTransaction]
    ) -> dict[str, Any]:
        """Deduplicate, categorize and persist signed transactions.

        Args:
            user_id: Owner of the account
            account_id: Account the transactions belong to
            transactions: Signed transactions, usually from normalize_for_import

        Returns:
            Dict with import statistics:
            - imported: number of new transactions stored
            - duplicates_skipped: lines whose hash was already stored or
              appeared earlier in the same batch
            - total_processed: number of lines received
            - needs_review: imported transactions flagged for review
            - transfers_linked: transfer pairs linked after the import

        Raises:
            NotFoundError: If the account doesn't exist or belongs to another user
        """
        self._get_owned_account(user_id, account_id)

        seen: set[str] = set()
        fresh: list[tuple[str, RawTransaction]] = []
        duplicates = 0
        for raw in transactions:
            txn_hash = transaction_hash(account_id, raw.amount, raw.date, raw.description_raw)
            if txn_hash in seen or self.db.find_transaction_by_hash(txn_hash) is not None:
                logger.debug("Skipping duplicate '%s' on %s", raw.description_raw, raw.date)
                duplicates += 1
                continue
            seen.add(txn_hash)
            fresh.append((txn_hash, raw))

        results = self.engine.categorize_batch([raw.description_raw for _, raw in fresh], user_id)

        imported = 0
        review = 0
        for (txn_hash, raw), result in zip(fresh, results):
            new_transaction = NewTransaction(
                user_id=user_id,
                account_id=account_id,
                hash=txn_hash,
                description_raw=raw.description_raw,
                description_clean=clean_description(raw.description_raw),
                amount=raw.amount,
                date=raw.date,
                external_id=raw.external_id,
                category_id=result.category_id,
                category_confidence=result.confidence,
                needs_review=result.needs_review,
                extra=raw.extra,
            )
            saved, created = self.db.save_transaction(new_transaction)
            if not created:
                # Lost a race with a concurrent import of the same line
                duplicates += 1
                continue
            imported += 1
            if saved.needs_review:
                review += 1

        transfers_linked = self._detect_transfers(user_id) if imported else 0

        logger.info(
            "Imported %d transactions into account %d (%d duplicates, %d to review)",
            imported,
            account_id,
            duplicates,
            review,
        )
        return {
            "imported": imported,
            "duplicates_skipped": duplicates,
            "total_processed": len(transactions),
            "needs_review": review,
            "transfers_linked": transfers_linked,
        }

    def import_file(
        self,
        file_path: str,
        user_id: str,
        account_id: int,
        bank_code: str = AUTO,
    ) -> dict[str, Any]:
        """Parse a statement file and import its transactions.

        Args:
            file_path: Path to the statement file
            user_id: Owner of the account
            account_id: Target account ID
            bank_code: Parser code, or AUTO to detect it from the file

        Returns:
            The import_batch statistics plus ``bank_code`` (the parser used)
            and ``skipped_lines`` (messages for malformed lines)

        Raises:
            FileNotFoundError: If the file doesn't exist
            NotFoundError: If the account doesn't exist or belongs to another user
            ParseError: If the file holds no recoverable transaction
            ValidationError: If the bank code is unknown
        """
        path = Path(file_path)
        if not path.exists():
            raise FileNotFoundError(f"Statement file not found: {file_path}")
        self._get_owned_account(user_id, account_id)

        content = decode_content(path.read_bytes())
        parser = resolve_parser(bank_code, path.name, content)
        logger.info("Parsing %s with %s", path.name, parser.info.bank_code)
        report = parser.parse_report(content)

        summary = self.import_batch(
            user_id,
            account_id,
            [normalize_for_import(parsed) for parsed in report.transactions],
        )
        summary["bank_code"] = parser.info.bank_code
        summary["skipped_lines"] = [str(skipped) for skipped in report.skipped_lines]
        return summary

    def _get_owned_account(self, user_id: str, account_id: int) -> Account:
        account = self.db.get_account(account_id)
        if account is None or account.user_id != user_id:
            raise NotFoundError(account_not_found(account_id))
        return account

    def _detect_transfers(self, user_id: str) -> int:
        try:
            return self.transfer_detector.detect(user_id)
        except Exception:
            logger.exception("Transfer detection failed for user %s", user_id)
            return 0
