# desklock.events - events passed through the daemon event queue
# Event sources and the locker supervisor post these; the lock state
# machine consumes them one at a time, in arrival order.

import dataclasses

# Events from the event sources:

@dataclasses.dataclass(frozen=True)
class ScreenIdleChanged:
	'''The X screen saver activated (idle) or deactivated.'''
	idle: bool

@dataclasses.dataclass(frozen=True)
class PrepareForSleep:
	'''logind announced the system is about to sleep (start=True) or
	has resumed (start=False).'''
	start: bool

@dataclasses.dataclass(frozen=True)
class LockRequested:
	'''logind asked the session to lock (e.g. loginctl lock-session).'''

@dataclasses.dataclass(frozen=True)
class UnlockRequested:
	'''logind asked the session to unlock.'''

# Events from the locker supervisor:

@dataclasses.dataclass(frozen=True)
class LockerStarted:
	process: object  # desklock.locker.LockerProcess

@dataclasses.dataclass(frozen=True)
class LockerReady:
	'''The locker released the inhibitor lock we passed to it.'''
	pid: int

@dataclasses.dataclass(frozen=True)
class LockerExited:
	pid: int
	returncode: int

@dataclasses.dataclass(frozen=True)
class LockerFailed:
	error: Exception

# Daemon control events:

@dataclasses.dataclass(frozen=True)
class SourceFailed:
	source: str
	error: Exception

@dataclasses.dataclass(frozen=True)
class Quit:
	reason: str = 'requested'
