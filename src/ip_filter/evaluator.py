"""
Admissibility evaluator.

Composes address parsing, range validation, range matching, and the
optional denylist check into one verdict. Checks run in a fixed order and
stop at the first failure:

1. Candidate address must parse
2. At least one range must be supplied
3. Every range literal must be valid (fail closed, nothing is matched otherwise)
4. The address must fall inside one of the ranges
5. If requested, the address must not be on the denylist
"""

from dataclasses import dataclass
from typing import Optional

from .address_normalizer import AddressNormalizer
from .audit_logger import AuditLogger
from .denylist_cache import DenylistCache
from .enums import RejectionReason
from .exceptions import AddressParseError, RangeParseError
from .i18n import get_message
from .models import EvaluationRequest, EvaluationResult, Range
from .range_matcher import RangeMatcher


@dataclass
class RangeValidation:
    """Outcome of validating every supplied range literal."""

    ranges: list[Range]
    invalid: list[str]

    @property
    def valid(self) -> bool:
        return not self.invalid


class AdmissibilityEvaluator:
    """
    Decides whether a candidate address is admissible.

    Range literals are validated as a whole before any matching happens;
    a single malformed literal rejects the request. Denylist problems never
    surface here: the cache degrades to stale or empty data on its own.
    """

    def __init__(
        self,
        denylist: Optional[DenylistCache] = None,
        normalizer: Optional[AddressNormalizer] = None,
        matcher: Optional[RangeMatcher] = None,
        logger: Optional[AuditLogger] = None,
        language: Optional[str] = None,
    ) -> None:
        """
        Initialize the evaluator.

        Args:
            denylist: Denylist cache consulted when a request sets check_tor;
                without one the denylist check always passes
            normalizer: Address/range parser
            matcher: Range matcher
            logger: Optional audit logger for decisions
            language: Diagnostic language ('en' or 'de')
        """
        self._denylist = denylist
        self._normalizer = normalizer or AddressNormalizer()
        self._matcher = matcher or RangeMatcher()
        self._logger = logger
        self._language = language

    def validate_ranges(self, literals: list[str]) -> RangeValidation:
        """
        Parse every range literal, collecting the ones that fail.

        Args:
            literals: Caller-supplied range literals

        Returns:
            RangeValidation with parsed ranges (input order) and the invalid
            literals verbatim (input order)
        """
        ranges: list[Range] = []
        invalid: list[str] = []
        for literal in literals:
            try:
                ranges.append(self._normalizer.parse_range_literal(literal))
            except RangeParseError:
                invalid.append(literal)
        return RangeValidation(ranges=ranges, invalid=invalid)

    async def evaluate(self, request: EvaluationRequest) -> EvaluationResult:
        """
        Evaluate one request.

        Args:
            request: Candidate address, range literals, and denylist flag

        Returns:
            EvaluationResult; ``error`` explains every negative verdict
        """
        try:
            address = self._normalizer.parse(request.ip_address)
        except AddressParseError:
            return self._reject(
                request,
                RejectionReason.INVALID_ADDRESS,
                get_message(
                    "evaluation.invalid_address", self._language,
                    ip_address=request.ip_address,
                ),
            )

        if not request.cidr_ranges:
            return self._reject(
                request,
                RejectionReason.NO_RANGES,
                get_message("evaluation.no_ranges", self._language),
            )

        validation = self.validate_ranges(request.cidr_ranges)
        if not validation.valid:
            return self._reject(
                request,
                RejectionReason.INVALID_RANGES,
                get_message(
                    "evaluation.invalid_ranges", self._language,
                    ranges=", ".join(validation.invalid),
                ),
            )

        matched = self._matcher.first_match(address, validation.ranges)
        if matched is None:
            return self._reject(
                request,
                RejectionReason.NOT_IN_RANGE,
                get_message("evaluation.not_in_range", self._language),
            )

        if request.check_tor and self._denylist is not None:
            if await self._denylist.is_listed(address):
                return self._reject(
                    request,
                    RejectionReason.DENYLISTED,
                    get_message(
                        "evaluation.denylisted", self._language,
                        ip_address=request.ip_address,
                    ),
                    matched_range=matched.text,
                )

        if self._logger:
            self._logger.log_decision(
                ip_address=request.ip_address,
                result=True,
                range_count=len(request.cidr_ranges),
                matched_range=matched.text,
                check_tor=request.check_tor,
            )
        return EvaluationResult.admitted()

    def _reject(
        self,
        request: EvaluationRequest,
        reason: RejectionReason,
        message: str,
        matched_range: Optional[str] = None,
    ) -> EvaluationResult:
        if self._logger:
            self._logger.log_decision(
                ip_address=request.ip_address,
                result=False,
                reason=reason.value,
                range_count=len(request.cidr_ranges),
                matched_range=matched_range,
                check_tor=request.check_tor,
            )
        return EvaluationResult.rejected(reason, message)
