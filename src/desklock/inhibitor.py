# desklock.inhibitor - logind sleep inhibitor locks
# A delay inhibitor lock postpones system sleep until it is released
# (or logind's InhibitDelayMaxSec passes).  logind hands it to us as a
# file descriptor; closing it releases the lock.

import os
import select
import threading

import desklock
from desklock.logging import log

log = log.getChild('inhibitor')

INHIBITOR_WHAT = 'sleep'
INHIBITOR_WHO = 'desklock'
INHIBITOR_WHY = 'Lock screen on sleep'
INHIBITOR_MODE = 'delay'

# Shared state behind one or more InhibitorHandle references.
# The file descriptor is closed once the last reference is dropped.
class InhibitorLock:
	def __init__(self, fd):
		self.fd = fd
		self.refs = 0
		self.mutex = threading.Lock()

	@property
	def held(self):
		return self.fd is not None

	def __str__(self):
		return 'inhibitor lock (fd %s, %d refs)' % (self.fd, self.refs)


class InhibitorHandle:
	'''One reference to an inhibitor lock.

	Each handle is released independently; releasing a handle twice is
	a no-op.  The lock itself is released when all handles are.
	'''

	def __init__(self, lock):
		with lock.mutex:
			assert lock.held, 'Cannot reference an already released inhibitor lock'
			lock.refs += 1
		self.lock = lock
		self.released = False

	def duplicate(self):
		if self.released:
			raise ValueError('Cannot duplicate a released inhibitor handle')
		return InhibitorHandle(self.lock)

	def release(self):
		lock = self.lock
		with lock.mutex:
			if self.released:
				return
			self.released = True
			lock.refs -= 1
			if lock.refs > 0:
				return
			fd, lock.fd = lock.fd, None
		log.debug('Releasing inhibitor lock (fd %d).', fd)
		os.close(fd)

	def __repr__(self):
		return '<InhibitorHandle %s%s>' % (self.lock, ' (released)' if self.released else '')


class InheritedInhibitor:
	'''A duplicate of an inhibitor handle, made for a child process.

	The child gets the write end of a pipe (``fd``) instead of the raw
	logind descriptor, while the duplicated handle keeps the inhibition
	alive on its behalf.  When the child closes its end, we see EOF on
	the read end and release the duplicate.  This lets us notice when
	the locker is ready.  Processes the child leaves behind may keep the
	pipe open, so the waiter can also be cancelled (once the child has
	exited).
	'''

	def __init__(self, handle):
		self.handle = handle
		(self.read_fd, self.fd) = os.pipe()

		# Written to by cancel() to wake up wait_released().
		(self.cancel_r, self.cancel_w) = os.pipe()

		# Guards the descriptors against cancel() racing close().
		self.mutex = threading.Lock()

	# Close our copy of the child's end.  Call after the child was
	# spawned, so that EOF on the read end means the child let go.
	def detach(self):
		with self.mutex:
			if self.fd is not None:
				os.close(self.fd)
				self.fd = None

	# Block until the child releases its end or cancel() is called,
	# then release the duplicate handle.  Returns True if the child
	# released it.
	def wait_released(self):
		released = False
		try:
			while True:
				(readable, _, _) = select.select([self.read_fd, self.cancel_r], [], [])
				if self.read_fd in readable and not os.read(self.read_fd, 4096):
					released = True
					break
				if self.cancel_r in readable:
					break
		finally:
			self.close()
		return released

	# Stop waiting for the child.  Safe to call from any thread, and
	# after close().
	def cancel(self):
		with self.mutex:
			if self.cancel_w is not None:
				os.write(self.cancel_w, b'x')

	# Abandon the transfer, releasing the duplicate.  Idempotent.
	def close(self):
		with self.mutex:
			for name in ('fd', 'read_fd', 'cancel_r', 'cancel_w'):
				fd = getattr(self, name)
				if fd is not None:
					os.close(fd)
					setattr(self, name, None)
		self.handle.release()


class InhibitorManager:
	'''Acquires and releases sleep inhibitor locks through logind.

	``inhibit`` is a callable taking (what, who, why, mode) and
	returning a file descriptor, raising desklock.AcquisitionDenied on
	failure (see desklock.modules.logind).
	'''

	def __init__(self, inhibit):
		self.inhibit = inhibit

	def acquire(self, reason=INHIBITOR_WHY):
		fd = self.inhibit(INHIBITOR_WHAT, INHIBITOR_WHO, reason, INHIBITOR_MODE)
		if fd is None:
			raise desklock.AcquisitionDenied('logind did not return an inhibitor lock')
		handle = InhibitorHandle(InhibitorLock(fd))
		log.debug('Took %s.', handle.lock)
		return handle

	def transfer(self, handle):
		inherited = InheritedInhibitor(handle.duplicate())
		log.debug('Transferring %s to child (fd %d).', handle.lock, inherited.fd)
		return inherited

	def release(self, handle):
		handle.release()
