import pytest

dbus = pytest.importorskip('dbus')
pytest.importorskip('gi')

import desklock
from desklock.events import PrepareForSleep, LockRequested, UnlockRequested, SourceFailed
from desklock.modules.dbus import DBusModule
from desklock.modules.logind import LogindModule, MANAGER_INTERFACE, SESSION_INTERFACE
from desklock.modules.power import PowerSource
from desklock.modules.session import SessionSource


class InlineGLib:
	'''Runs "GLib thread" work directly in the calling thread.'''

	def run_sync(self, func, *args):
		return func(*args)


@pytest.fixture
def bus(mocker):
	return mocker.Mock(name='system_bus')


@pytest.fixture
def logind(mocker, bus):
	dbus_module = mocker.Mock(name='dbus_module')
	dbus_module.glib = InlineGLib()
	dbus_module.system_bus = bus
	return LogindModule(dbus_module)


def test_inhibit_takes_fd(logind, bus):
	manager = bus.get_object.return_value
	manager.Inhibit.return_value.take.return_value = 9

	assert logind.inhibit('sleep', 'desklock', 'why', 'delay') == 9
	bus.get_object.assert_called_with(bus_name='org.freedesktop.login1',
									  object_path='/org/freedesktop/login1')
	manager.Inhibit.assert_called_once_with('sleep', 'desklock', 'why', 'delay',
											dbus_interface=MANAGER_INTERFACE)


def test_inhibit_failure_is_acquisition_denied(logind, bus):
	bus.get_object.return_value.Inhibit.side_effect = dbus.DBusException('Access denied')
	with pytest.raises(desklock.AcquisitionDenied, match='Access denied'):
		logind.inhibit('sleep', 'desklock', 'why', 'delay')


def test_set_idle_hint(logind, bus):
	logind.set_idle_hint('/org/freedesktop/login1/session/_32', True)

	bus.get_object.assert_called_with(bus_name='org.freedesktop.login1',
									  object_path='/org/freedesktop/login1/session/_32')
	bus.get_object.return_value.SetIdleHint.assert_called_once_with(
		True, dbus_interface=SESSION_INTERFACE)


def test_set_idle_hint_failure_is_publish_error(logind, bus):
	bus.get_object.return_value.SetIdleHint.side_effect = dbus.DBusException('nope')
	with pytest.raises(desklock.PublishError):
		logind.set_idle_hint('/org/freedesktop/login1/session/_32', False)


def test_subscribe_failure_is_connection_error(logind, bus):
	bus.add_signal_receiver.side_effect = dbus.DBusException('no match rule')
	with pytest.raises(desklock.SourceConnectionError, match='PrepareForSleep'):
		PowerSource(logind, lambda event: None).start()


def test_power_source_posts_sleep_events(logind, bus):
	events = []
	source = PowerSource(logind, events.append)
	source.start()

	kwargs = bus.add_signal_receiver.call_args.kwargs
	assert kwargs['signal_name'] == 'PrepareForSleep'
	assert kwargs['dbus_interface'] == MANAGER_INTERFACE

	source.handle_sleep_signal(dbus.Boolean(True))
	source.handle_sleep_signal(dbus.Boolean(False))
	assert events == [PrepareForSleep(True), PrepareForSleep(False)]

	source.stop()
	assert bus.remove_signal_receiver.call_count == 1


def test_session_source_subscribes_on_session_path(logind, bus):
	bus.get_object.return_value.GetSession.return_value = dbus.ObjectPath(
		'/org/freedesktop/login1/session/_32')
	events = []
	source = SessionSource(logind, '2', events.append)
	source.start()

	bus.get_object.return_value.GetSession.assert_called_once_with(
		'2', dbus_interface=MANAGER_INTERFACE)
	subscribed = {c.kwargs['signal_name']: c.kwargs['path'] for c in bus.add_signal_receiver.call_args_list}
	assert subscribed == {
		'Lock': '/org/freedesktop/login1/session/_32',
		'Unlock': '/org/freedesktop/login1/session/_32',
	}

	source.handle_lock()
	source.handle_unlock()
	assert events == [LockRequested(), UnlockRequested()]

	source.set_idle_hint(True)
	bus.get_object.assert_called_with(bus_name='org.freedesktop.login1',
									  object_path='/org/freedesktop/login1/session/_32')

	source.stop()
	assert bus.remove_signal_receiver.call_count == 2


def test_unknown_session_is_connection_error(logind, bus):
	bus.get_object.return_value.GetSession.side_effect = dbus.DBusException('No session')
	with pytest.raises(desklock.SourceConnectionError, match='No session'):
		SessionSource(logind, '99', lambda event: None).start()


def test_bus_disconnect_is_reported(mocker):
	events = []
	module = DBusModule(InlineGLib(), events.append)
	module.handle_disconnected()

	assert len(events) == 1
	assert isinstance(events[0], SourceFailed)
	assert isinstance(events[0].error, desklock.SourceConnectionError)
