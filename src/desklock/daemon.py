# desklock.daemon - daemon event queue and lifecycle

import queue
import signal

from desklock.events import Quit, SourceFailed
from desklock.logging import log

class EventLoop:
	'''The daemon's single ordered event queue.

	Any thread may post(); events are handled one at a time, in the
	order they were posted, by whoever calls run().
	'''

	def __init__(self):
		# SimpleQueue.put is reentrant, so signal handlers may post.
		self.queue = queue.SimpleQueue()
		self.stopping = False

	def post(self, event):
		self.queue.put(event)

	def run(self, handler):
		log.debug('Starting event loop.')
		while not self.stopping:
			event = self.queue.get()
			log.debug('Got event %r', event)
			match event:
				case Quit(reason=reason):
					log.info('Quitting (%s).', reason)
					self.stopping = True
				case SourceFailed(source=source, error=error):
					log.debug('Event source %r failed.', source)
					raise error
				case _:
					handler(event)
		log.debug('Event loop exited.')


class Daemon:
	def __init__(self, event_loop, modules, supervisor, machine):
		self.event_loop = event_loop
		self.modules = modules
		self.supervisor = supervisor
		self.machine = machine

	# SIGINT / SIGTERM handler.
	def signal_stop(self, signalnum, _frame):
		log.info('Got signal %r - asynchronously requesting quit.', signal.strsignal(signalnum))
		# Make sure that the logic runs from the main loop, and not an
		# arbitrary place in the script.
		self.event_loop.post(Quit(signal.strsignal(signalnum)))

	def run(self):
		signal.signal(signal.SIGINT, self.signal_stop)
		signal.signal(signal.SIGTERM, self.signal_stop)

		try:
			self.modules.start()
			self.machine.start()
			log.info('Waiting for lock events...')
			self.event_loop.run(self.machine.handle)
		finally:
			self.shutdown()

	# Runs on every exit path, including errors.
	def shutdown(self):
		log.debug('Shutting down.')
		try:
			self.machine.shutdown()
		finally:
			try:
				self.supervisor.stop()
			finally:
				self.modules.stop()
		log.debug('Shutdown complete.')


# Assemble the daemon for the given configuration.
def build(config, event_loop=None):
	# Imported here so that the bus and X bindings are only loaded by
	# the daemon itself.
	from desklock.idle_hint import IdleHintPublisher
	from desklock.inhibitor import InhibitorManager
	from desklock.locker import LockerSupervisor
	from desklock.module import ModuleStack
	from desklock.modules.dbus import DBusModule
	from desklock.modules.glib import GLibModule
	from desklock.modules.logind import LogindModule
	from desklock.modules.power import PowerSource
	from desklock.modules.session import SessionSource
	from desklock.modules.xss import DisplayIdleSource
	from desklock.state import LockStateMachine

	if event_loop is None:
		event_loop = EventLoop()
	post = event_loop.post

	glib = GLibModule()
	dbus_module = DBusModule(glib, post)
	logind = LogindModule(dbus_module)
	session = SessionSource(logind, config.session_id, post)
	modules = ModuleStack([
		glib,
		dbus_module,
		logind,
		session,
		PowerSource(logind, post),
		DisplayIdleSource(config.display, post),
	])

	supervisor = LockerSupervisor(post)
	machine = LockStateMachine(
		config,
		supervisor,
		InhibitorManager(logind.inhibit),
		IdleHintPublisher(session.set_idle_hint, config.idle_hint),
	)
	return Daemon(event_loop, modules, supervisor, machine)


# Daemon entry point.  Returns when asked to quit; raises
# desklock.UserError on fatal errors.
def run(config):
	build(config).run()
