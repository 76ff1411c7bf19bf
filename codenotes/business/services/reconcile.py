"""
Repair pass for drift between canonical problems and their projections.

Canonical `problems` rows are the source of truth: embedded topic entries are
rewritten from them, and membership sets are resynced from problem flags.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from codenotes.business.services.problem import snapshot_of, to_read
from codenotes.config import logger
from codenotes.data import repositories as repo
from codenotes.data.schemas import MembershipFlag, ReconcileReport, Topic

reconcile_logger = logger.getChild("consistency")


async def reconcile_owner(db: AsyncSession, owner_id: str) -> ReconcileReport:
    report = ReconcileReport()
    canonical = {p.problem_id: to_read(p) for p in await repo.list_problems(db, owner_id)}
    topics = {t.topic_id for t in await repo.list_topics(db, owner_id)}

    # Orphaned or misplaced entries
    current_entries = {}
    emptied_topics = set()
    for entry in await repo.list_entries(db, owner_id):
        problem = canonical.get(entry.problem_id)
        if problem is None or problem.topic_id != entry.topic_id:
            await repo.remove_entry(db, owner_id, entry.topic_id, entry.problem_id)
            emptied_topics.add(entry.topic_id)
            report.entries_removed += 1
        else:
            current_entries[entry.problem_id] = entry.snapshot

    # Missing or stale entries, and topics that were never created
    for problem_id, problem in canonical.items():
        if problem.topic_id not in topics:
            await repo.insert_topic(
                db, Topic(owner_id=owner_id, topic_id=problem.topic_id, title=problem.topic_id)
            )
            topics.add(problem.topic_id)
            report.topics_created += 1
        snapshot = snapshot_of(problem)
        if current_entries.get(problem_id) != snapshot:
            await repo.upsert_entry(db, owner_id, problem.topic_id, problem_id, snapshot)
            report.entries_written += 1

    for topic_id in emptied_topics:
        if topic_id in topics and await repo.count_entries(db, owner_id, topic_id) == 0:
            await repo.delete_topic(db, owner_id, topic_id)
            report.topics_pruned += 1

    # Membership sets follow the problem flags
    lists = await repo.list_memberships(db, owner_id)
    for flag in MembershipFlag:
        listed = set(lists.get(flag.list_name, []))
        flagged = {pid for pid, p in canonical.items() if getattr(p, flag.problem_field)}
        for problem_id in flagged - listed:
            await repo.add_membership(db, owner_id, flag.list_name, problem_id)
            report.memberships_added += 1
        for problem_id in listed - flagged:
            await repo.remove_membership(db, owner_id, flag.list_name, problem_id)
            report.memberships_removed += 1

    if report.drift_found:
        reconcile_logger.warning(f"Repaired drift for owner {owner_id}: {report.model_dump()}")
    else:
        reconcile_logger.info(f"No drift found for owner {owner_id}")
    return report
