"""Integration-style tests for identity resolution persistence."""

from __future__ import annotations

import unittest
from datetime import date

from sqlalchemy import create_engine, delete, event, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from poligraph.identity.types import Decision, IdentityThresholds, Judgement, MatchMethod, Observation
from poligraph.models.base import Base
from poligraph.models.identity_decision import IdentityDecision
from poligraph.models.politician import ExternalId, Mandate, Politician
from poligraph.services.identity import (
    list_active_decisions,
    list_decision_history,
    list_review_queue,
    record_manual_decision,
    resolve_observation,
    upsert_external_id,
)


class IdentityServicesTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        cls.engine = create_engine(
            "sqlite+pysqlite:///:memory:",
            future=True,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        cls.SessionLocal = sessionmaker(bind=cls.engine, autoflush=False, autocommit=False, future=True)
        Base.metadata.create_all(cls.engine)

    @classmethod
    def tearDownClass(cls) -> None:
        Base.metadata.drop_all(cls.engine)
        cls.engine.dispose()

    def setUp(self) -> None:
        self.db: Session = self.SessionLocal()
        self._reset_tables()
        self.db.add_all(
            [
                Politician(
                    id="pol-1",
                    first_name="Thierry",
                    last_name="Cousin",
                    birth_date=date(1960, 5, 16),
                    mandates=[Mandate(mandate_type="MAIRE", department_code="45")],
                ),
                Politician(id="pol-2", first_name="Jean", last_name="Martin"),
            ]
        )
        self.db.commit()

    def tearDown(self) -> None:
        self.db.close()

    def test_birthdate_match_is_logged_for_review(self) -> None:
        result = resolve_observation(
            self.db,
            Observation(
                first_name="THIERRY",
                last_name="cousin",
                source="RNE",
                source_id="45321",
                birth_date=date(1960, 5, 16),
            ),
        )

        self.assertEqual(result.politician_id, "pol-1")
        self.assertEqual(result.decision, Decision.UNDECIDED)
        self.assertEqual(result.method, MatchMethod.BIRTHDATE)

        rows = list_decision_history(self.db, "RNE", "45321")
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0].judgement, Judgement.UNDECIDED.value)
        self.assertEqual(rows[0].decided_by, "system:sync-rne")
        self.assertEqual(rows[0].evidence_json["candidateCount"], 1)
        self.assertEqual([row.id for row in list_review_queue(self.db)], [rows[0].id])
        self.assertIsNone(self.db.scalar(select(ExternalId)))

    def test_auto_match_links_external_id(self) -> None:
        thresholds = IdentityThresholds(auto_match=0.9, review=0.7)

        result = resolve_observation(
            self.db,
            Observation(
                first_name="Thierry",
                last_name="Cousin",
                source="AN",
                source_id="PA1234",
                birth_date=date(1960, 5, 17),
            ),
            thresholds=thresholds,
        )

        self.assertEqual(result.decision, Decision.SAME)
        external_id = self.db.scalar(select(ExternalId).where(ExternalId.source == "AN"))
        self.assertIsNotNone(external_id)
        self.assertEqual(external_id.external_id, "PA1234")
        self.assertEqual(external_id.politician_id, "pol-1")

        repeat = resolve_observation(
            self.db,
            Observation(first_name="Thierry", last_name="Cousin", source="AN", source_id="PA1234"),
        )
        self.assertEqual(repeat.method, MatchMethod.EXTERNAL_ID)
        self.assertEqual(repeat.confidence, 1.0)
        self.assertEqual(len(list_decision_history(self.db, "AN", "PA1234")), 2)

    def test_link_can_be_disabled(self) -> None:
        resolve_observation(
            self.db,
            Observation(
                first_name="Thierry",
                last_name="Cousin",
                source="AN",
                source_id="PA1234",
                birth_date=date(1960, 5, 16),
            ),
            thresholds=IdentityThresholds(auto_match=0.9, review=0.7),
            link_external_id=False,
        )

        self.assertIsNone(self.db.scalar(select(ExternalId)))

    def test_manual_not_same_supersedes_and_blocks(self) -> None:
        observation = Observation(
            first_name="Thierry",
            last_name="Cousin",
            source="RNE",
            source_id="45321",
            birth_date=date(1960, 5, 16),
        )
        resolve_observation(self.db, observation)
        original = list_active_decisions(self.db, "RNE", "45321")[0]

        manual = record_manual_decision(
            self.db,
            source_type="RNE",
            source_id="45321",
            politician_id="pol-1",
            judgement=Judgement.NOT_SAME,
            decided_by="admin:alice",
            note="Homonyme du Loiret",
        )

        self.assertIsNotNone(manual)
        self.assertEqual(manual.method, MatchMethod.MANUAL.value)
        self.assertEqual(manual.confidence, 1.0)
        self.assertEqual(manual.evidence_json["supersedes"], [original.id])
        self.db.refresh(original)
        self.assertEqual(original.superseded_by_id, manual.id)
        self.assertEqual([row.id for row in list_active_decisions(self.db, "RNE", "45321")], [manual.id])
        self.assertEqual(list_review_queue(self.db), [])

        blocked = resolve_observation(self.db, observation)

        self.assertIsNone(blocked.politician_id)
        self.assertTrue(blocked.blocked)
        self.assertEqual(blocked.decision, Decision.NEW)
        self.assertEqual(len(list_decision_history(self.db, "RNE", "45321")), 2)

    def test_manual_same_short_circuits_later_resolutions(self) -> None:
        record_manual_decision(
            self.db,
            source_type="HATVP",
            source_id="h-77",
            politician_id="pol-2",
            judgement=Judgement.SAME,
            decided_by="admin:bob",
        )

        result = resolve_observation(
            self.db,
            Observation(first_name="Jean", last_name="Martin", source="HATVP", source_id="h-77"),
        )

        self.assertEqual(result.politician_id, "pol-2")
        self.assertEqual(result.method, MatchMethod.MANUAL)
        self.assertEqual(result.decision, Decision.SAME)
        self.assertEqual(len(list_decision_history(self.db, "HATVP", "h-77")), 1)

    def test_manual_decision_for_unknown_politician_returns_none(self) -> None:
        decision = record_manual_decision(
            self.db,
            source_type="RNE",
            source_id="45321",
            politician_id="missing",
            judgement=Judgement.SAME,
            decided_by="admin:alice",
        )

        self.assertIsNone(decision)
        self.assertEqual(self.db.scalars(select(IdentityDecision)).all(), [])

    def test_upsert_external_id_repoints_existing_row(self) -> None:
        upsert_external_id(self.db, "WIKIDATA", "Q42", "pol-1")
        self.db.commit()

        with self.assertLogs("poligraph.services.identity", level="INFO") as captured:
            row = upsert_external_id(self.db, "WIKIDATA", "Q42", "pol-2")
        self.db.commit()

        self.assertEqual(row.politician_id, "pol-2")
        self.assertEqual(len(self.db.scalars(select(ExternalId)).all()), 1)
        self.assertIn("identity.external_id_repointed", captured.output[0])

    def test_failed_log_append_keeps_result_and_session(self) -> None:
        observation = Observation(
            first_name="Thierry",
            last_name="Cousin",
            source="RNE",
            source_id="45321",
            birth_date=date(1960, 5, 16),
            context={"seen": date(2024, 1, 1)},
        )

        with self.assertLogs("poligraph.identity.resolver", level="ERROR") as captured:
            result = resolve_observation(self.db, observation)

        self.assertEqual(result.politician_id, "pol-1")
        self.assertEqual(result.decision, Decision.UNDECIDED)
        self.assertIn("identity.decision_log_failed", captured.output[0])
        self.assertEqual(list_decision_history(self.db, "RNE", "45321"), [])

        retry = resolve_observation(
            self.db,
            Observation(
                first_name="Thierry",
                last_name="Cousin",
                source="RNE",
                source_id="45321",
                birth_date=date(1960, 5, 16),
            ),
        )

        self.assertEqual(retry.politician_id, "pol-1")
        self.assertEqual(len(list_decision_history(self.db, "RNE", "45321")), 1)

    def _reset_tables(self) -> None:
        self.db.execute(delete(IdentityDecision))
        self.db.execute(delete(ExternalId))
        self.db.execute(delete(Mandate))
        self.db.execute(delete(Politician))
        self.db.commit()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    dbapi_connection.execute("PRAGMA foreign_keys = ON")


class DecisionLogRetentionTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        cls.engine = create_engine(
            "sqlite+pysqlite:///:memory:",
            future=True,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        event.listen(cls.engine, "connect", _enable_sqlite_foreign_keys)
        cls.SessionLocal = sessionmaker(bind=cls.engine, autoflush=False, autocommit=False, future=True)
        Base.metadata.create_all(cls.engine)

    @classmethod
    def tearDownClass(cls) -> None:
        Base.metadata.drop_all(cls.engine)
        cls.engine.dispose()

    def setUp(self) -> None:
        self.db: Session = self.SessionLocal()
        self.db.execute(delete(IdentityDecision))
        self.db.execute(delete(Politician))
        self.db.add(Politician(id="pol-1", first_name="Thierry", last_name="Cousin", birth_date=date(1960, 5, 16)))
        self.db.commit()

    def tearDown(self) -> None:
        self.db.close()

    def test_politician_with_logged_decisions_cannot_be_deleted(self) -> None:
        resolve_observation(
            self.db,
            Observation(
                first_name="Thierry",
                last_name="Cousin",
                source="RNE",
                source_id="45321",
                birth_date=date(1960, 5, 16),
            ),
        )

        with self.assertRaises(IntegrityError):
            self.db.execute(delete(Politician).where(Politician.id == "pol-1"))
        self.db.rollback()

        self.assertIsNotNone(self.db.get(Politician, "pol-1"))
        self.assertEqual(len(list_decision_history(self.db, "RNE", "45321")), 1)


if __name__ == "__main__":
    unittest.main()
