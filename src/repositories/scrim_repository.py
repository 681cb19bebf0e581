"""Persistence helpers for scrims, memberships and score submissions."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import datetime
from typing import Any

from sqlalchemy import delete, func, select, update
from sqlalchemy.orm import Session

from domain.common import ScrimStatus, Team
from models.scrim import Scrim, ScrimPlayer, ScrimScoreSubmission
from repositories.common import dialect_insert


def _status_values(statuses: ScrimStatus | Sequence[ScrimStatus]) -> list[str]:
    if isinstance(statuses, ScrimStatus):
        return [statuses.value]
    return [status.value for status in statuses]


def get_scrim(session: Session, scrim_id: int, *, for_update: bool = False) -> Scrim | None:
    stmt = select(Scrim).where(Scrim.id == scrim_id).execution_options(populate_existing=True)
    if for_update:
        stmt = stmt.with_for_update()
    return session.execute(stmt).scalar_one_or_none()


def insert_scrim(session: Session, **values: Any) -> Scrim:
    scrim = Scrim(**values)
    session.add(scrim)
    session.flush()
    return scrim


def list_scrims_by_status(
    session: Session,
    statuses: ScrimStatus | Sequence[ScrimStatus],
) -> list[Scrim]:
    stmt = (
        select(Scrim)
        .where(Scrim.status.in_(_status_values(statuses)))
        .order_by(Scrim.created_at.desc(), Scrim.id.desc())
    )
    return list(session.execute(stmt).scalars())


def expire_stale_scrims(session: Session, now: datetime) -> int:
    """Flip every overdue waiting scrim to expired in one conditional update."""
    result = session.execute(
        update(Scrim)
        .where(Scrim.status == ScrimStatus.WAITING.value, Scrim.expires_at < now)
        .values(status=ScrimStatus.EXPIRED.value)
        .execution_options(synchronize_session=False)
    )
    return int(result.rowcount or 0)


def transition_status(
    session: Session,
    scrim_id: int,
    *,
    expected: ScrimStatus | Sequence[ScrimStatus],
    new_status: ScrimStatus,
    **values: Any,
) -> bool:
    """Compare-and-swap the scrim status; True only for the caller whose update hit the row."""
    result = session.execute(
        update(Scrim)
        .where(Scrim.id == scrim_id, Scrim.status.in_(_status_values(expected)))
        .values(status=new_status.value, **values)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def set_tracker_session(session: Session, scrim_id: int, tracker_session_id: str) -> None:
    session.execute(
        update(Scrim)
        .where(Scrim.id == scrim_id)
        .values(tracker_session_id=tracker_session_id)
        .execution_options(synchronize_session=False)
    )


def finalize_scrim(
    session: Session,
    scrim_id: int,
    *,
    team_a_score: int,
    team_b_score: int,
    winner: str,
    now: datetime,
) -> bool:
    return transition_status(
        session,
        scrim_id,
        expected=ScrimStatus.SCORING,
        new_status=ScrimStatus.FINALIZED,
        team_a_score=team_a_score,
        team_b_score=team_b_score,
        winner=winner,
        finalized_at=now,
    )


def claim_rating_marker(session: Session, scrim_id: int, now: datetime) -> bool:
    """Set ranked_processed_at once; False when another run already holds it."""
    result = session.execute(
        update(Scrim)
        .where(
            Scrim.id == scrim_id,
            Scrim.status == ScrimStatus.FINALIZED.value,
            Scrim.ranked_processed_at.is_(None),
        )
        .values(ranked_processed_at=now)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def clear_rating_marker(session: Session, scrim_id: int) -> None:
    session.execute(
        update(Scrim)
        .where(Scrim.id == scrim_id)
        .values(ranked_processed_at=None)
        .execution_options(synchronize_session=False)
    )


def list_players(session: Session, scrim_id: int) -> list[ScrimPlayer]:
    """Members in join order."""
    stmt = (
        select(ScrimPlayer)
        .where(ScrimPlayer.scrim_id == scrim_id)
        .order_by(ScrimPlayer.joined_at, ScrimPlayer.id)
        .execution_options(populate_existing=True)
    )
    return list(session.execute(stmt).scalars())


def get_player(session: Session, scrim_id: int, account_id: str) -> ScrimPlayer | None:
    stmt = (
        select(ScrimPlayer)
        .where(ScrimPlayer.scrim_id == scrim_id, ScrimPlayer.account_id == account_id)
        .execution_options(populate_existing=True)
    )
    return session.execute(stmt).scalar_one_or_none()


def count_players(session: Session, scrim_id: int) -> int:
    stmt = select(func.count()).select_from(ScrimPlayer).where(ScrimPlayer.scrim_id == scrim_id)
    return int(session.execute(stmt).scalar_one())


def upsert_player(
    session: Session,
    *,
    scrim_id: int,
    account_id: str,
    display_name: str,
    now: datetime,
) -> None:
    """Insert a membership, or refresh the display name of an existing one."""
    stmt = dialect_insert(session, ScrimPlayer).values(
        scrim_id=scrim_id,
        account_id=account_id,
        display_name=display_name,
        is_ready=False,
        voted_reroll=False,
        joined_at=now,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=[ScrimPlayer.scrim_id, ScrimPlayer.account_id],
        set_={"display_name": stmt.excluded.display_name},
    )
    session.execute(stmt)


def delete_player(session: Session, scrim_id: int, account_id: str) -> int:
    result = session.execute(
        delete(ScrimPlayer)
        .where(ScrimPlayer.scrim_id == scrim_id, ScrimPlayer.account_id == account_id)
        .execution_options(synchronize_session=False)
    )
    return int(result.rowcount or 0)


def set_player_ready(
    session: Session,
    *,
    scrim_id: int,
    account_id: str,
    is_ready: bool,
    now: datetime,
) -> None:
    session.execute(
        update(ScrimPlayer)
        .where(ScrimPlayer.scrim_id == scrim_id, ScrimPlayer.account_id == account_id)
        .values(is_ready=is_ready, ready_at=now if is_ready else None)
        .execution_options(synchronize_session=False)
    )


def set_reroll_vote(session: Session, *, scrim_id: int, account_id: str, voted: bool) -> None:
    session.execute(
        update(ScrimPlayer)
        .where(ScrimPlayer.scrim_id == scrim_id, ScrimPlayer.account_id == account_id)
        .values(voted_reroll=voted)
        .execution_options(synchronize_session=False)
    )


def assign_teams(session: Session, scrim_id: int, assignment: Mapping[str, Team]) -> None:
    """Write each member's team and clear every reroll vote."""
    for team in (Team.TEAM_A, Team.TEAM_B):
        account_ids = [account_id for account_id, assigned in assignment.items() if assigned is team]
        if not account_ids:
            continue
        session.execute(
            update(ScrimPlayer)
            .where(ScrimPlayer.scrim_id == scrim_id, ScrimPlayer.account_id.in_(account_ids))
            .values(team=team.value)
            .execution_options(synchronize_session=False)
        )
    session.execute(
        update(ScrimPlayer)
        .where(ScrimPlayer.scrim_id == scrim_id)
        .values(voted_reroll=False)
        .execution_options(synchronize_session=False)
    )


def upsert_score_submission(
    session: Session,
    *,
    scrim_id: int,
    account_id: str,
    display_name: str | None,
    team_a_score: int,
    team_b_score: int,
    now: datetime,
) -> None:
    stmt = dialect_insert(session, ScrimScoreSubmission).values(
        scrim_id=scrim_id,
        account_id=account_id,
        display_name=display_name,
        team_a_score=team_a_score,
        team_b_score=team_b_score,
        submitted_at=now,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=[ScrimScoreSubmission.scrim_id, ScrimScoreSubmission.account_id],
        set_={
            "display_name": stmt.excluded.display_name,
            "team_a_score": stmt.excluded.team_a_score,
            "team_b_score": stmt.excluded.team_b_score,
            "submitted_at": stmt.excluded.submitted_at,
        },
    )
    session.execute(stmt)


def list_score_submissions(session: Session, scrim_id: int) -> list[ScrimScoreSubmission]:
    stmt = (
        select(ScrimScoreSubmission)
        .where(ScrimScoreSubmission.scrim_id == scrim_id)
        .order_by(ScrimScoreSubmission.submitted_at, ScrimScoreSubmission.id)
        .execution_options(populate_existing=True)
    )
    return list(session.execute(stmt).scalars())
