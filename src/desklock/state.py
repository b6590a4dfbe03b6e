# desklock.state - lock state machine
# Consumes events from the daemon event queue, and decides when to
# start and stop the locker, when to hold and release the sleep
# inhibitor lock, and what idle hint to publish.

import enum

import desklock
from desklock.events import (
	ScreenIdleChanged, PrepareForSleep, LockRequested, UnlockRequested,
	LockerStarted, LockerReady, LockerExited, LockerFailed,
)
from desklock.logging import log

class LockState(enum.Enum):
	UNLOCKED = 'unlocked'
	LOCKING = 'locking'
	LOCKED = 'locked'
	UNLOCKING = 'unlocking'


class LockStateMachine:
	'''The only place where lock / unlock decisions are made.

	Lock triggers (idle, sleep, explicit lock) are level-triggered: they
	all mean "the screen should be locked", so repeating them while
	LOCKING or LOCKED does nothing.

	When inhibitor passing is enabled, we keep a "standing" delay
	inhibitor lock while unlocked, so that sleep can be delayed until
	the locker is ready.  It is handed to the locker on start, and our
	own copy is released once the locker reports it is ready.
	'''

	def __init__(self, config, supervisor, inhibitors, idle_hint):
		self.log = log.getChild('state')

		self.locker_command = config.locker_command
		self.pass_inhibitor = config.pass_inhibitor

		self.supervisor = supervisor
		self.inhibitors = inhibitors
		self.idle_hint = idle_hint

		self.state = LockState.UNLOCKED

		# The running locker (LockerProcess), once LockerStarted arrived.
		self.process = None

		# Our own reference to the inhibitor lock, if held.
		self.inhibitor = None

		# Whether the running locker was given an inherited inhibitor,
		# and so will report readiness.
		self.awaiting_ready = False

		# An unlock arrived while the locker was still being started.
		self.unlock_pending = False

		# A lock trigger arrived while the locker was being stopped.
		self.relock_pending = False

	def __str__(self):
		return 'state: %s, locker: %s, inhibitor: %s' % (
			self.state.value,
			self.process,
			self.inhibitor,
		)

	def start(self):
		self.hold_inhibitor()
		self.idle_hint.publish(False)

	def shutdown(self):
		if self.process is not None:
			self.log.debug('Stopping locker on shutdown.')
			self.supervisor.request_stop(self.process)
		self.release_inhibitor()

	def handle(self, event):
		self.log.trace('Handling %r (%s)', event, self)
		match event:
			case ScreenIdleChanged(idle=True):
				self.log.info('Screen saver activated.')
				self.lock()
			case ScreenIdleChanged(idle=False):
				self.log.debug('Screen saver deactivated.')
			case PrepareForSleep(start=True):
				self.log.info('Preparing for system sleep.')
				self.lock()
			case PrepareForSleep(start=False):
				self.log.info('Resumed from system sleep.')
				if self.state is LockState.UNLOCKED:
					self.hold_inhibitor()
			case LockRequested():
				self.log.info('Lock requested.')
				self.lock()
			case UnlockRequested():
				self.log.info('Unlock requested.')
				self.unlock()
			case LockerStarted(process=process):
				self.handle_started(process)
			case LockerReady(pid=pid):
				self.handle_ready(pid)
			case LockerExited(pid=pid, returncode=returncode):
				self.handle_exited(pid, returncode)
			case LockerFailed(error=error):
				raise error
			case _:
				raise ValueError('Unknown event: %r' % (event,))

	# -------------------------------------------------------------------------
	# Inhibitor lock

	def hold_inhibitor(self):
		if not self.pass_inhibitor or self.inhibitor is not None:
			return
		try:
			self.inhibitor = self.inhibitors.acquire()
		except desklock.AcquisitionDenied as e:
			self.log.warning('Could not take a sleep inhibitor lock, '
							 'the system may sleep before the screen is locked: %s', e)

	def release_inhibitor(self):
		if self.inhibitor is not None:
			self.inhibitors.release(self.inhibitor)
			self.inhibitor = None

	# -------------------------------------------------------------------------
	# Transitions

	def set_state(self, state):
		if state is self.state:
			return
		self.log.debug('%s -> %s', self.state.value, state.value)
		self.state = state
		self.idle_hint.publish(state is not LockState.UNLOCKED)

	def lock(self):
		match self.state:
			case LockState.UNLOCKED:
				self.start_locker()
			case LockState.LOCKING:
				if self.unlock_pending:
					self.log.debug('Cancelling pending unlock.')
					self.unlock_pending = False
			case LockState.LOCKED:
				self.log.debug('Already locked.')
			case LockState.UNLOCKING:
				self.log.debug('Locker is exiting, will lock again once it is gone.')
				self.relock_pending = True

	def unlock(self):
		match self.state:
			case LockState.UNLOCKED:
				self.log.debug('Already unlocked.')
			case LockState.LOCKING:
				if self.process is None:
					self.log.debug('Locker is still starting, deferring unlock.')
					self.unlock_pending = True
				else:
					self.stop_locker()
			case LockState.LOCKED:
				self.stop_locker()
			case LockState.UNLOCKING:
				self.relock_pending = False

	def start_locker(self):
		assert self.process is None, 'Locker already running'
		inherited = None
		if self.pass_inhibitor:
			self.hold_inhibitor()
			if self.inhibitor is not None:
				inherited = self.inhibitors.transfer(self.inhibitor)
		self.awaiting_ready = inherited is not None
		self.unlock_pending = False
		self.supervisor.start(self.locker_command, inherited)
		self.set_state(LockState.LOCKING)

	def stop_locker(self):
		self.supervisor.request_stop(self.process)
		self.set_state(LockState.UNLOCKING)

	def is_current(self, pid, what):
		if self.process is None or self.process.pid != pid:
			self.log.debug('Ignoring stale locker %s notification (wanted PID %s, got PID %r).',
						   what, self.process and self.process.pid, pid)
			return False
		return True

	def handle_started(self, process):
		assert self.process is None, 'Got a second locker while one is running'
		self.process = process
		self.log.security('Screen locker started (PID %d).', process.pid)
		if self.unlock_pending:
			self.unlock_pending = False
			self.stop_locker()
		elif not self.awaiting_ready:
			self.set_state(LockState.LOCKED)

	def handle_ready(self, pid):
		if not self.is_current(pid, 'ready'):
			return
		self.log.debug('Locker is ready, releasing our inhibitor lock.')
		self.release_inhibitor()
		if self.state is LockState.LOCKING:
			self.set_state(LockState.LOCKED)

	def handle_exited(self, pid, returncode):
		if not self.is_current(pid, 'exit'):
			return
		# Exiting on our SIGTERM is expected; anything else non-zero is not.
		if returncode != 0 and self.state is not LockState.UNLOCKING:
			self.log.warning('Screen locker (PID %d) exited with status %d, unlocking.',
							 pid, returncode)
		else:
			self.log.security('Screen locker (PID %d) exited, unlocking.', pid)
		self.process = None
		self.awaiting_ready = False
		self.unlock_pending = False
		self.set_state(LockState.UNLOCKED)
		self.hold_inhibitor()

		if self.relock_pending:
			self.relock_pending = False
			self.lock()
