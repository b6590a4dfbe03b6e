import desklock
from desklock.idle_hint import IdleHintPublisher


def test_publishes_changes_only(mocker):
	set_idle_hint = mocker.Mock()
	publisher = IdleHintPublisher(set_idle_hint, enabled=True)

	for idle in [False, True, True, True, False, False]:
		publisher.publish(idle)

	assert set_idle_hint.call_args_list == [
		mocker.call(False),
		mocker.call(True),
		mocker.call(False),
	]


def test_disabled_publishes_nothing(mocker):
	set_idle_hint = mocker.Mock()
	publisher = IdleHintPublisher(set_idle_hint, enabled=False)

	publisher.publish(True)
	publisher.publish(False)

	set_idle_hint.assert_not_called()


def test_publish_failure_is_logged_and_retried(mocker, caplog):
	set_idle_hint = mocker.Mock(side_effect=[desklock.PublishError('no bus'), None])
	publisher = IdleHintPublisher(set_idle_hint, enabled=True)

	publisher.publish(True)
	assert 'Could not set idle hint: no bus' in caplog.text
	assert publisher.published is None

	publisher.publish(True)
	assert set_idle_hint.call_count == 2
	assert publisher.published is True
