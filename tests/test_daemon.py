import signal

import pytest

import desklock
import desklock.daemon
from desklock.daemon import Daemon, EventLoop
from desklock.events import LockRequested, UnlockRequested, Quit, SourceFailed


class RecordingModules:
	def __init__(self, log):
		self.log = log

	def start(self):
		self.log.append('modules.start')

	def stop(self):
		self.log.append('modules.stop')


class RecordingMachine:
	def __init__(self, log):
		self.log = log
		self.events = []

	def start(self):
		self.log.append('machine.start')

	def handle(self, event):
		self.events.append(event)

	def shutdown(self):
		self.log.append('machine.shutdown')


class RecordingSupervisor:
	def __init__(self, log):
		self.log = log

	def stop(self):
		self.log.append('supervisor.stop')


@pytest.fixture
def parts():
	log = []
	loop = EventLoop()
	machine = RecordingMachine(log)
	daemon = Daemon(loop, RecordingModules(log), RecordingSupervisor(log), machine)
	return daemon, loop, machine, log


@pytest.fixture(autouse=True)
def restore_signals():
	handlers = {s: signal.getsignal(s) for s in (signal.SIGINT, signal.SIGTERM)}
	yield
	for s, handler in handlers.items():
		signal.signal(s, handler)


def test_events_are_handled_in_order_until_quit(parts):
	daemon, loop, machine, log = parts
	loop.post(LockRequested())
	loop.post(UnlockRequested())
	loop.post(Quit())
	loop.post(LockRequested())

	daemon.run()

	assert machine.events == [LockRequested(), UnlockRequested()]
	assert log == ['modules.start', 'machine.start',
				   'machine.shutdown', 'supervisor.stop', 'modules.stop']


def test_source_failure_is_fatal_and_shuts_down(parts):
	daemon, loop, machine, log = parts
	loop.post(SourceFailed('xss', desklock.SourceConnectionError('display gone')))
	loop.post(LockRequested())

	with pytest.raises(desklock.SourceConnectionError, match='display gone'):
		daemon.run()

	assert machine.events == []
	assert log[-3:] == ['machine.shutdown', 'supervisor.stop', 'modules.stop']


def test_handler_error_still_shuts_down(parts, mocker):
	daemon, loop, machine, log = parts
	mocker.patch.object(machine, 'handle', side_effect=desklock.SpawnError('no locker'))
	loop.post(LockRequested())

	with pytest.raises(desklock.SpawnError):
		daemon.run()

	assert log[-3:] == ['machine.shutdown', 'supervisor.stop', 'modules.stop']


def test_startup_failure_still_shuts_down(parts, mocker):
	daemon, loop, machine, log = parts
	mocker.patch.object(daemon.modules, 'start',
						side_effect=desklock.SourceConnectionError('no bus'))

	with pytest.raises(desklock.SourceConnectionError):
		daemon.run()

	assert log == ['machine.shutdown', 'supervisor.stop', 'modules.stop']


def test_signal_requests_quit(parts):
	daemon, loop, machine, log = parts
	daemon.signal_stop(signal.SIGTERM, None)
	assert isinstance(loop.queue.get_nowait(), Quit)


def test_main_exit_status(mocker, monkeypatch):
	monkeypatch.setenv('XDG_SESSION_ID', '2')
	monkeypatch.setenv('DISPLAY', ':0')
	mocker.patch('desklock.config.load_file', return_value={})
	run = mocker.patch('desklock.daemon.run')

	assert desklock.main(['-l', '-i', '--', 'xsecurelock', '--flag']) == 0
	config = run.call_args.args[0]
	assert config.locker_command == ('xsecurelock', '--flag')
	assert config.pass_inhibitor is True
	assert config.idle_hint is True

	run.side_effect = desklock.SpawnError('no locker')
	assert desklock.main(['xsecurelock']) == 1


def test_main_without_locker_fails(mocker, monkeypatch):
	monkeypatch.setenv('XDG_SESSION_ID', '2')
	monkeypatch.setenv('DISPLAY', ':0')
	mocker.patch('desklock.config.load_file', return_value={})
	run = mocker.patch('desklock.daemon.run')

	assert desklock.main([]) == 1
	run.assert_not_called()
