"""Four-tier categorization engine.

Tiers are tried in order and the first hit wins:

1. user cache: entries keyed by (clean description, user id)
2. global cache: entries keyed by (clean description, no user)
3. keyword heuristics from an ordered priority table
4. the external AI classifier, batched up to ten descriptions per request

Keyword and AI results are written back to the global cache. Only an
explicit human correction writes the user tier.
"""

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from statementflow.classifiers.base import Classifier, ClassifierReply
from statementflow.database.base import Database
from statementflow.domain.category import UNCATEGORIZED
from statementflow.domain.entities import Category, needs_review
from statementflow.domain.errors import ClassifierError, NotFoundError, category_not_found
from statementflow.domain.keywords import KEYWORD_CONFIDENCE, KEYWORD_RULES, KeywordRules, match_keyword
from statementflow.domain.normalizer import clean_description
from statementflow.logger import get_logger
from statementflow.settings import DEFAULT_CLASSIFIER_MAX_WORKERS, MAX_CLASSIFIER_BATCH_SIZE

logger = get_logger(__name__)

USER_DEFINED_CONFIDENCE = 1.0
DEFAULT_AI_CONFIDENCE = 0.8
FALLBACK_CONFIDENCE = 0.1


class CategorizationSource(str, Enum):
    """Tier that produced a categorization."""

    USER_CACHE = "user_cache"
    GLOBAL_CACHE = "global_cache"
    KEYWORD = "keyword"
    AI = "ai"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class CategorizationResult:
    """Resolved category for one description."""

    category_id: Optional[int]
    category_name: str
    confidence: float
    source: CategorizationSource
    merchant: Optional[str] = None

    @property
    def needs_review(self) -> bool:
        return needs_review(self.confidence)


class _CategoryIndex:
    """Categories loaded once per call, looked up by id or case-insensitive name."""

    def __init__(self, categories: Sequence[Category]):
        self.by_id = {category.id: category for category in categories}
        self.by_name = {category.name.lower(): category for category in categories}

    def name_for(self, category_id: int) -> str:
        category = self.by_id.get(category_id)
        return category.name if category is not None else UNCATEGORIZED

    def find(self, name: Optional[str]) -> Optional[Category]:
        if not name:
            return None
        return self.by_name.get(name.strip().lower())

    @property
    def names(self) -> list[str]:
        return [category.name for category in self.by_id.values()]


class CategorizationEngine:
    """Resolves clean descriptions to categories, cheapest tier first."""

    def __init__(
        self,
        db: Database,
        classifier: Optional[Classifier] = None,
        keyword_rules: KeywordRules = KEYWORD_RULES,
        batch_size: int = MAX_CLASSIFIER_BATCH_SIZE,
        max_workers: int = DEFAULT_CLASSIFIER_MAX_WORKERS,
    ):
        """Initialize the engine.

        Args:
            db: Database instance
            classifier: External AI classifier; None disables the AI tier
            keyword_rules: Ordered keyword priority table
            batch_size: Descriptions per classifier request (1 to 10)
            max_workers: Upper bound on concurrent classifier requests
        """
        if not 1 <= batch_size <= MAX_CLASSIFIER_BATCH_SIZE:
            raise ValueError(f"batch_size must be between 1 and {MAX_CLASSIFIER_BATCH_SIZE}")
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self.db = db
        self.classifier = classifier
        self.keyword_rules = keyword_rules
        self.batch_size = batch_size
        self.max_workers = max_workers

    def categorize(self, description_raw: str, user_id: Optional[str] = None) -> CategorizationResult:
        """Categorize one description, calling the classifier only if every local tier misses."""
        categories = _CategoryIndex(self.db.list_categories())
        description_clean = clean_description(description_raw)
        result = self._resolve_locally(description_clean, user_id, categories)
        if result is not None:
            return result
        return self._classify_single(description_raw, description_clean, categories)

    def categorize_batch(
        self, descriptions: Sequence[str], user_id: Optional[str] = None
    ) -> list[CategorizationResult]:
        """Categorize many raw descriptions, returning one result per input in order.

        Local tiers run per item. The remaining descriptions are deduplicated
        by clean form and sent to the classifier in chunks of ``batch_size``,
        with at most ``max_workers`` requests in flight. Cache writes happen
        on the calling thread.
        """
        categories = _CategoryIndex(self.db.list_categories())
        results: list[Optional[CategorizationResult]] = [None] * len(descriptions)
        pending: dict[str, list[int]] = {}
        raw_for_clean: dict[str, str] = {}

        for position, description_raw in enumerate(descriptions):
            description_clean = clean_description(description_raw)
            if description_clean in pending:
                pending[description_clean].append(position)
                continue
            result = self._resolve_locally(description_clean, user_id, categories)
            if result is not None:
                results[position] = result
            else:
                pending[description_clean] = [position]
                raw_for_clean[description_clean] = description_raw

        for description_clean, result in self._classify_pending(raw_for_clean, categories).items():
            for position in pending[description_clean]:
                results[position] = result

        return results

    def record_user_correction(self, user_id: str, description_raw: str, category_id: int) -> None:
        """Store a human correction in the user tier.

        The entry wins over every other tier for this user from now on and is
        never downgraded by automatic writes.

        Raises:
            NotFoundError: If the category doesn't exist
        """
        if self.db.get_category(category_id) is None:
            raise NotFoundError(category_not_found(category_id))
        description_clean = clean_description(description_raw)
        self.db.upsert_cache_entry(
            description_clean,
            user_id,
            category_id,
            USER_DEFINED_CONFIDENCE,
            is_user_defined=True,
        )
        logger.info("[CATEGORIZE] User %s correction stored for '%s'", user_id, description_clean)

    def _resolve_locally(
        self, description_clean: str, user_id: Optional[str], categories: _CategoryIndex
    ) -> Optional[CategorizationResult]:
        if user_id is not None:
            entry = self.db.find_cache_entry(description_clean, user_id)
            if entry is not None:
                self._record_hit(entry.id)
                logger.debug("[CATEGORIZE] User cache hit for '%s'", description_clean)
                confidence = USER_DEFINED_CONFIDENCE if entry.is_user_defined else entry.confidence_score
                return CategorizationResult(
                    category_id=entry.category_id,
                    category_name=categories.name_for(entry.category_id),
                    confidence=confidence,
                    source=CategorizationSource.USER_CACHE,
                )

        entry = self.db.find_cache_entry(description_clean, None)
        if entry is not None:
            self._record_hit(entry.id)
            logger.debug("[CATEGORIZE] Global cache hit for '%s'", description_clean)
            return CategorizationResult(
                category_id=entry.category_id,
                category_name=categories.name_for(entry.category_id),
                confidence=entry.confidence_score,
                source=CategorizationSource.GLOBAL_CACHE,
            )

        rules = [rule for rule in self.keyword_rules if categories.find(rule[0]) is not None]
        category_name = match_keyword(description_clean, rules)
        if category_name is not None:
            category = categories.find(category_name)
            logger.debug("[CATEGORIZE] Keyword hit for '%s': %s", description_clean, category.name)
            self._write_global(description_clean, category.id, KEYWORD_CONFIDENCE)
            return CategorizationResult(
                category_id=category.id,
                category_name=category.name,
                confidence=KEYWORD_CONFIDENCE,
                source=CategorizationSource.KEYWORD,
            )
        return None

    def _classify_single(
        self, description_raw: str, description_clean: str, categories: _CategoryIndex
    ) -> CategorizationResult:
        if self.classifier is None:
            return self._fallback(categories)
        try:
            reply = self.classifier.classify(description_raw, categories.names)
        except ClassifierError as e:
            logger.warning("[CATEGORIZE] Classifier failed for '%s': %s", description_clean, e)
            return self._fallback(categories)
        except Exception:
            logger.exception("[CATEGORIZE] Unexpected classifier error for '%s'", description_clean)
            return self._fallback(categories)
        return self._from_reply(description_clean, reply, categories)

    def _classify_pending(
        self, raw_for_clean: dict[str, str], categories: _CategoryIndex
    ) -> dict[str, CategorizationResult]:
        if not raw_for_clean:
            return {}
        if self.classifier is None:
            return {clean: self._fallback(categories) for clean in raw_for_clean}

        keys = list(raw_for_clean)
        chunks = [keys[i:i + self.batch_size] for i in range(0, len(keys), self.batch_size)]
        names = categories.names
        resolved: dict[str, CategorizationResult] = {}

        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(chunks))) as executor:
            futures = {
                executor.submit(
                    self.classifier.classify_batch,
                    [raw_for_clean[clean] for clean in chunk],
                    names,
                ): chunk
                for chunk in chunks
            }
            for future in as_completed(futures):
                chunk = futures[future]
                try:
                    replies = future.result()
                except ClassifierError as e:
                    logger.warning("[CATEGORIZE] Batch of %d failed: %s", len(chunk), e)
                    for clean in chunk:
                        resolved[clean] = self._fallback(categories)
                    continue
                except Exception:
                    logger.exception("[CATEGORIZE] Unexpected error in batch of %d", len(chunk))
                    for clean in chunk:
                        resolved[clean] = self._fallback(categories)
                    continue

                for index, clean in enumerate(chunk):
                    reply = replies.get(index)
                    if reply is None:
                        logger.warning(
                            "[CATEGORIZE] Batch reply missing index %d, retrying '%s' alone",
                            index + 1,
                            clean,
                        )
                        resolved[clean] = self._classify_single(raw_for_clean[clean], clean, categories)
                    else:
                        resolved[clean] = self._from_reply(clean, reply, categories)
        return resolved

    def _from_reply(
        self, description_clean: str, reply: ClassifierReply, categories: _CategoryIndex
    ) -> CategorizationResult:
        category = categories.find(reply.category)
        if category is None:
            logger.warning(
                "[CATEGORIZE] Unknown category %r for '%s', using %s",
                reply.category,
                description_clean,
                UNCATEGORIZED,
            )
            category = categories.find(UNCATEGORIZED)
        confidence = reply.confidence if reply.confidence is not None else DEFAULT_AI_CONFIDENCE

        if category is not None:
            self._write_global(description_clean, category.id, confidence)
        return CategorizationResult(
            category_id=category.id if category is not None else None,
            category_name=category.name if category is not None else UNCATEGORIZED,
            confidence=confidence,
            source=CategorizationSource.AI,
            merchant=reply.merchant,
        )

    def _fallback(self, categories: _CategoryIndex) -> CategorizationResult:
        category = categories.find(UNCATEGORIZED)
        return CategorizationResult(
            category_id=category.id if category is not None else None,
            category_name=UNCATEGORIZED,
            confidence=FALLBACK_CONFIDENCE,
            source=CategorizationSource.FALLBACK,
        )

    def _write_global(self, description_clean: str, category_id: int, confidence: float) -> None:
        try:
            self.db.upsert_cache_entry(description_clean, None, category_id, confidence)
        except Exception:
            logger.exception("[CATEGORIZE] Failed to update global cache for '%s'", description_clean)

    def _record_hit(self, entry_id: int) -> None:
        try:
            self.db.record_cache_hit(entry_id)
        except Exception:
            logger.exception("[CATEGORIZE] Failed to record hit for cache entry %d", entry_id)
