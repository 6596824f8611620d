import logging
import unittest

from postdesk.core.logging import EVENT_POST_CREATED, log_event, setup_logging


class TestStructuredLogging(unittest.TestCase):
    def test_log_event_formats_fields(self):
        logger = logging.getLogger("postdesk.test")
        with self.assertLogs(logger, level="INFO") as logs:
            log_event(logger, "info", EVENT_POST_CREATED, post_id="abc", body_length=7)
        self.assertEqual(logs.output, ["INFO:postdesk.test:post_created: post_id=abc body_length=7"])

    def test_log_event_without_fields(self):
        logger = logging.getLogger("postdesk.test")
        with self.assertLogs(logger, level="WARNING") as logs:
            log_event(logger, "warning", "bare_event")
        self.assertEqual(logs.records[0].getMessage(), "bare_event")
        self.assertEqual(logs.records[0].levelname, "WARNING")

    def test_setup_logging_adds_handler_once(self):
        root = logging.getLogger()
        setup_logging()
        count = len(root.handlers)
        setup_logging()
        self.assertEqual(len(root.handlers), count)

    def test_post_creation_logs_length_not_content(self):
        import os
        import tempfile

        from postdesk import create_app
        from postdesk.services import post_service

        db_fd, db_path = tempfile.mkstemp(suffix=".db")
        os.close(db_fd)
        try:
            app = create_app({"SQLALCHEMY_DATABASE_URI": f"sqlite:///{db_path}", "TESTING": True})
            with app.app_context():
                with self.assertLogs("postdesk.services.post_service", level="INFO") as logs:
                    post_service.create_post("alice", "Secret title", "Secret body")
        finally:
            os.remove(db_path)

        joined = "\n".join(logs.output)
        self.assertIn("post_created", joined)
        self.assertIn("body_length=11", joined)
        self.assertNotIn("Secret", joined)


if __name__ == "__main__":
    unittest.main()
