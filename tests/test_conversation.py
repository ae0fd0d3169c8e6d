import unittest
from unittest.mock import MagicMock

from app.models.conversation import SessionRegistry


def make_session(session_id, agent_name):
    session = MagicMock()
    session.session_id = session_id
    session.active_agent.name = agent_name
    return session


class TestSessionRegistry(unittest.TestCase):

    def setUp(self):
        self.registry = SessionRegistry()
        self.session = make_session("session-1", "kojoGreeter")

    def test_add_session(self):
        self.registry.add_session(self.session)

        self.assertIn("session-1", self.registry.active_sessions)
        self.assertEqual(len(self.registry), 1)

    def test_get_session(self):
        self.registry.add_session(self.session)

        self.assertIs(self.registry.get_session("session-1"), self.session)

    def test_get_nonexistent_session(self):
        self.assertIsNone(self.registry.get_session("nonexistent-id"))

    def test_remove_session(self):
        self.registry.add_session(self.session)

        self.registry.remove_session("session-1")

        self.assertNotIn("session-1", self.registry.active_sessions)
        # Removing twice is harmless
        self.registry.remove_session("session-1")

    def test_get_all_sessions(self):
        other = make_session("session-2", "procurementSpecialist")
        self.registry.add_session(self.session)
        self.registry.add_session(other)

        self.assertEqual(self.registry.get_all_sessions(), [self.session, other])

    def test_agents_in_use(self):
        self.registry.add_session(self.session)
        self.registry.add_session(make_session("session-2", "kojoGreeter"))
        self.registry.add_session(make_session("session-3", "procurementSpecialist"))

        self.assertEqual(
            self.registry.agents_in_use(),
            {"kojoGreeter": 2, "procurementSpecialist": 1},
        )


if __name__ == "__main__":
    unittest.main()
