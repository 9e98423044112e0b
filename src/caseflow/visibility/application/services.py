"""
Visibility Application Services
===============================

The Client Visibility Gateway. Grants and revocations change the case's
visibility fields through the Case Store so the pair is always written
together.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID, uuid4

from caseflow.activity.application import ActivityLog
from caseflow.activity.domain import ActivityEntry
from caseflow.cases.application import CaseService
from caseflow.cases.domain import Case
from caseflow.config import ActivityType, CaseStatus, FeedbackSentiment, settings
from caseflow.core import InvalidOrExpiredTokenException, InvalidStateException
from caseflow.core.validation import parse_payload
from caseflow.shared.infrastructure.clock import Clock
from caseflow.shared.infrastructure.logging import get_logger
from caseflow.visibility.application.dto import FeedbackDTO, ShareGrantDTO
from caseflow.visibility.domain import (
    CaseTimelineView, ClientFeedback, IssuedToken, ShareGrant, generate_token, hash_token
)

logger = get_logger(__name__)


# ========== Repository Interfaces (Dependency Inversion) ==========

class IShareGrantRepository(ABC):
    """Interface for share grant storage."""

    @abstractmethod
    async def add(self, grant: ShareGrant) -> ShareGrant:
        """Insert a grant."""

    @abstractmethod
    async def get_by_token_hash(self, token_hash: str) -> Optional[ShareGrant]:
        """Look a grant up by token digest (revoked grants included)."""

    @abstractmethod
    async def revoke_active(self, case_id: UUID, revoked_at: datetime) -> int:
        """Revoke every non-revoked grant of a case; returns the count."""


class IFeedbackRepository(ABC):
    """Interface for client feedback storage."""

    @abstractmethod
    async def add_if_absent(self, feedback: ClientFeedback) -> bool:
        """Insert unless the grant already has feedback. Returns True if inserted."""


# ========== Application Services ==========

class VisibilityGateway:
    """
    Issues, validates and revokes share tokens.

    At most one valid token exists per case: granting revokes the previous
    grant in the same transaction, and storage enforces a unique active
    grant per case.
    """

    def __init__(
        self,
        grant_repository: IShareGrantRepository,
        feedback_repository: IFeedbackRepository,
        case_service: CaseService,
        activity_log: ActivityLog,
        clock: Clock,
        token_bytes: Optional[int] = None,
        token_ttl_days: Optional[int] = None
    ):
        self._grants = grant_repository
        self._feedback = feedback_repository
        self._cases = case_service
        self._activity = activity_log
        self._clock = clock
        self._token_bytes = token_bytes or settings.share_token_bytes
        self._token_ttl_days = token_ttl_days if token_ttl_days is not None else settings.share_token_ttl_days

    async def grant(
        self,
        case_id: UUID,
        contact_email: Optional[str] = None,
        actor: Optional[str] = None
    ) -> IssuedToken:
        """
        Issue a new token for a case, invalidating any previous one.

        Raises:
            ResourceNotFoundException: unknown case
            ValidationException: malformed contact email
        """
        request = parse_payload(ShareGrantDTO, {"contact_email": contact_email, "actor": actor})
        await self._cases.require(case_id)
        now = self._clock.now()

        replaced = await self._grants.revoke_active(case_id, now)

        token = generate_token(self._token_bytes)
        grant = await self._grants.add(ShareGrant(
            id=uuid4(),
            case_id=case_id,
            token_hash=hash_token(token),
            contact_email=request.contact_email,
            created_by=request.actor,
            created_at=now,
            expires_at=now + timedelta(days=self._token_ttl_days) if self._token_ttl_days else None,
        ))

        await self._cases.set_client_viewable(case_id, True)
        await self._activity.append(ActivityEntry(
            case_id=case_id,
            activity_type=ActivityType.STATUS_CHANGE,
            content="Client access granted" if not replaced else "Client access link regenerated",
            created_at=now,
            created_by=request.actor,
            metadata={
                "event": "visibility_granted",
                "grant_id": str(grant.id),
                "contact_email": request.contact_email,
                "replaced_grants": replaced,
            },
        ))

        logger.info(
            "Share token issued",
            extra={"case_id": str(case_id), "grant_id": str(grant.id), "replaced_grants": replaced}
        )
        return IssuedToken(grant=grant, token=token, replaced_grants=replaced)

    async def revoke(self, case_id: UUID, actor: Optional[str] = None) -> tuple[Case, int]:
        """
        Revoke the active token and make the case internal again.

        Raises:
            ResourceNotFoundException: unknown case
            InvalidStateException: the case has no active token
        """
        await self._cases.require(case_id)
        now = self._clock.now()

        revoked = await self._grants.revoke_active(case_id, now)
        if revoked == 0:
            raise InvalidStateException(
                f"Case {case_id} has no active share token",
                {"case_id": str(case_id)}
            )

        case = await self._cases.set_client_viewable(case_id, False)
        await self._activity.append(ActivityEntry(
            case_id=case_id,
            activity_type=ActivityType.STATUS_CHANGE,
            content="Client access revoked",
            created_at=now,
            created_by=actor,
            metadata={"event": "visibility_revoked", "revoked_grants": revoked},
        ))

        logger.info("Share token revoked", extra={"case_id": str(case_id), "revoked_grants": revoked})
        return case, revoked

    async def _valid_grant(self, token: str) -> ShareGrant:
        if not token:
            raise InvalidOrExpiredTokenException()
        grant = await self._grants.get_by_token_hash(hash_token(token))
        if grant is None or not grant.is_valid(self._clock.now()):
            logger.info(
                "Share token rejected",
                extra={"grant_id": str(grant.id) if grant else None, "revoked": grant.revoked if grant else None}
            )
            raise InvalidOrExpiredTokenException()
        return grant

    async def resolve(self, token: str) -> CaseTimelineView:
        """
        Read-only client view of the case behind ``token``.

        Raises:
            InvalidOrExpiredTokenException: unknown, revoked or expired token
        """
        grant = await self._valid_grant(token)
        case = await self._cases.require(grant.case_id)
        entries = await self._activity.list_for_case(case.id, include_internal=False)
        return CaseTimelineView.build(case, entries)

    async def submit_feedback(
        self,
        token: str,
        sentiment: FeedbackSentiment,
        comment: Optional[str] = None
    ) -> ClientFeedback:
        """
        Record client feedback; only closed cases accept it, once per grant.

        Raises:
            InvalidOrExpiredTokenException: bad token
            InvalidStateException: case not closed, or feedback already given
            ValidationException: unknown sentiment
        """
        request = parse_payload(FeedbackDTO, {"sentiment": sentiment, "comment": comment})
        grant = await self._valid_grant(token)
        case = await self._cases.require(grant.case_id)

        if case.status != CaseStatus.CLOSED:
            raise InvalidStateException(
                "Feedback can only be submitted for closed cases",
                {"case_id": str(case.id), "status": case.status.value}
            )

        now = self._clock.now()
        feedback = ClientFeedback(
            id=uuid4(),
            grant_id=grant.id,
            case_id=case.id,
            sentiment=request.sentiment,
            comment=request.comment,
            contact_email=grant.contact_email,
            submitted_at=now,
        )
        if not await self._feedback.add_if_absent(feedback):
            raise InvalidStateException(
                "Feedback already submitted for this link",
                {"case_id": str(case.id)}
            )

        await self._activity.append(ActivityEntry(
            case_id=case.id,
            activity_type=ActivityType.NOTE,
            content=f"Client feedback: {request.sentiment.value}" + (f" - {request.comment}" if request.comment else ""),
            created_at=now,
            created_by=grant.contact_email,
            metadata={"event": "client_feedback", "sentiment": request.sentiment.value, "grant_id": str(grant.id)},
        ))

        logger.info(
            "Client feedback recorded",
            extra={"case_id": str(case.id), "sentiment": request.sentiment.value}
        )
        return feedback
