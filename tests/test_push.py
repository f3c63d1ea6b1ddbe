import unittest
from unittest.mock import MagicMock, Mock

import requests
from apscheduler.schedulers.background import BackgroundScheduler

from sc_connect.notifications.push import PushFeedbackListener, PushNotifier
from sc_connect.storage.base import StorageError

TOKEN = "ab" * 32


def _response(status_code=200, payload=None):
    response = Mock()
    response.status_code = status_code
    response.ok = status_code < 400
    response.text = ""
    response.json.return_value = payload
    return response


class TestPushNotifier(unittest.TestCase):
    def setUp(self):
        self.session = MagicMock()
        self.session.headers = {}
        self.notifier = PushNotifier(
            gateway_url="http://push.test/",
            api_key="secret",
            production=False,
            session=self.session,
        )

    def test_payload_with_sound(self):
        self.assertEqual(
            PushNotifier.build_payload("Hello", play_sound=True),
            {"aps": {"alert": "Hello", "badge": 1, "sound": "default"}},
        )

    def test_payload_without_sound_omits_key(self):
        payload = PushNotifier.build_payload("Hello", play_sound=False)
        self.assertNotIn("sound", payload["aps"])
        self.assertEqual(payload["aps"]["badge"], 1)

    def test_api_key_sets_bearer_header(self):
        self.assertEqual(self.session.headers["Authorization"], "Bearer secret")

    def test_send_posts_once_to_gateway(self):
        self.session.request.return_value = _response(200)

        self.notifier.send_notification([TOKEN], "Event: Homecoming is happening today.", True)

        self.session.request.assert_called_once()
        args, kwargs = self.session.request.call_args
        self.assertEqual(args, ("post", "http://push.test/notifications"))
        self.assertEqual(kwargs["json"]["tokens"], [TOKEN])
        self.assertFalse(kwargs["json"]["production"])
        self.assertEqual(kwargs["json"]["payload"]["aps"]["sound"], "default")
        self.assertTrue(self.notifier.connected)

    def test_empty_tokens_are_not_sent(self):
        self.notifier.send_notification(["", None], "Hello")
        self.session.request.assert_not_called()

    def test_connection_error_is_logged_not_raised(self):
        self.session.request.side_effect = requests.ConnectionError("refused")

        with self.assertLogs("sc_connect", level="ERROR"):
            self.notifier.send_notification([TOKEN], "Hello")

        self.assertFalse(self.notifier.connected)

    def test_rejected_notification_is_logged(self):
        self.session.request.return_value = _response(500)

        with self.assertLogs("sc_connect", level="ERROR"):
            self.notifier.send_notification([TOKEN], "Hello")

    def test_fetch_feedback_lowercases_devices(self):
        self.session.request.return_value = _response(200, [{"device": TOKEN.upper()}, {"other": 1}])

        self.assertEqual(self.notifier.fetch_feedback(), [TOKEN])

    def test_fetch_feedback_on_timeout_is_empty(self):
        self.session.request.side_effect = requests.Timeout()

        self.assertEqual(self.notifier.fetch_feedback(), [])


class TestPushFeedbackListener(unittest.TestCase):
    def test_poll_removes_each_reported_token(self):
        notifier = Mock()
        notifier.fetch_feedback.return_value = [TOKEN, "cd" * 32, "ef" * 32]
        store = Mock()
        store.remove_client_by_push_token.side_effect = [1, 0, StorageError("locked")]

        removed = PushFeedbackListener(notifier, store).poll()

        self.assertEqual(removed, 1)
        self.assertEqual(store.remove_client_by_push_token.call_count, 3)

    def test_start_registers_interval_job(self):
        scheduler = BackgroundScheduler()
        listener = PushFeedbackListener(Mock(), Mock())

        listener.start(scheduler, interval_seconds=10)

        job = scheduler.get_job(PushFeedbackListener.JOB_ID)
        self.assertIsNotNone(job)
        self.assertEqual(job.trigger.interval.total_seconds(), 10)


if __name__ == '__main__':
    unittest.main()
