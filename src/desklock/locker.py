# desklock.locker - screen locker process supervisor
# Runs the locker program, and reports its start, readiness and exit to
# the daemon event queue.

import os
import subprocess
import threading

import desklock
from desklock.events import LockerStarted, LockerReady, LockerExited, LockerFailed
from desklock.logging import log

# Environment variable telling the locker which inherited file
# descriptor holds the sleep inhibitor lock (xss-lock convention).
INHIBITOR_FD_VARIABLE = 'XSS_SLEEP_LOCK_FD'

# How often stop() reports that it is still waiting for the locker.
STOP_WARNING_INTERVAL = 5

class LockerProcess:
	def __init__(self, popen):
		self.popen = popen
		self.pid = popen.pid

	def __repr__(self):
		return '<LockerProcess PID %d>' % (self.pid,)


class LockerSupervisor:
	'''Owns the locker child process.

	start() returns immediately; the process is spawned and waited for
	on a supervisor thread, which posts LockerStarted, LockerReady (if
	the locker releases an inherited inhibitor) and LockerExited events.  The
	caller must not call start() again until it has seen LockerExited
	or LockerFailed.
	'''

	def __init__(self, post):
		self.log = log.getChild('locker')
		self.post = post

		# Supervisor threads.  Each one waits for its readiness watcher.
		self.threads = []

		# The live process, if any.  Used only for shutdown.
		self.process = None

		# Set when the daemon is shutting down.
		self.stopping = False

	def start(self, command, inherited=None):
		self.threads = [t for t in self.threads if t.is_alive()]
		thread = threading.Thread(target=self.supervise, args=(tuple(command), inherited),
								  name='locker-supervisor')
		self.threads.append(thread)
		thread.start()

	def request_stop(self, process):
		self.log.debug('Asking locker (PID %d) to exit...', process.pid)
		# Popen.terminate is a no-op if the process was already reaped.
		process.popen.terminate()

	def stop(self):
		self.stopping = True
		process = self.process
		if process is not None:
			self.request_stop(process)
		for thread in self.threads:
			# No SIGKILL: a locker which ignores SIGTERM is left to exit on
			# its own, but we say what we are waiting for.
			thread.join(STOP_WARNING_INTERVAL)
			while thread.is_alive():
				self.log.warning('Still waiting for the screen locker (%s) to exit...',
								 self.process or thread.name)
				thread.join(STOP_WARNING_INTERVAL)
		self.threads = []

	# Runs in the supervisor thread:
	def supervise(self, command, inherited):
		env = dict(os.environ)
		pass_fds = ()
		if inherited is not None:
			env[INHIBITOR_FD_VARIABLE] = str(inherited.fd)
			pass_fds = (inherited.fd,)

		self.log.debug('Running screen locker %r', command)
		try:
			popen = subprocess.Popen(command, env=env, pass_fds=pass_fds)
		except OSError as e:
			if inherited is not None:
				inherited.close()
			self.post(LockerFailed(desklock.SpawnError(
				'Could not start locker %r: %s' % (command[0], e))))
			return

		process = LockerProcess(popen)
		self.process = process
		if self.stopping:
			self.request_stop(process)
		self.log.debug('Started screen locker (PID %d).', process.pid)
		self.post(LockerStarted(process))

		watcher = None
		if inherited is not None:
			inherited.detach()
			watcher = threading.Thread(target=self.watch_ready, args=(process, inherited),
									   name='locker-ready')
			watcher.start()

		returncode = popen.wait()
		self.process = None
		if watcher is not None:
			# Processes the locker left behind may still hold the relay
			# pipe.  The locker is gone, so its reference is released
			# either way, before LockerExited is posted.
			inherited.cancel()
			watcher.join()
		self.post(LockerExited(process.pid, returncode))

	# Runs in the readiness watcher thread:
	def watch_ready(self, process, inherited):
		if not inherited.wait_released():
			self.log.debug('Locker (PID %d) exited without releasing its inhibitor lock.', process.pid)
			return
		self.log.debug('Locker (PID %d) released its inhibitor lock.', process.pid)
		self.post(LockerReady(process.pid))
