# desklock.module - long-running module machinery
# Event sources and the bus / main loop plumbing they need are
# modules: objects with a start() and a stop().

import traceback

import desklock
from desklock.logging import log

# Base class for modules.
class Module:
	# All modules should define their name.
	name = None

	def __init__(self):
		self.log = log.getChild('modules.' + self.name)

	# Start function.  If it returns, stop() will also be called
	# exactly once.  All resource acquisition and initialization
	# should happen here.
	def start(self):
		pass

	# Stop function.  Called if start() was called and returned.
	def stop(self):
		pass

	def __repr__(self):
		return '<%s module>' % (self.name,)


class ModuleStack:
	'''Starts modules in order, and stops the started ones in reverse.

	Modules should be listed after the modules they depend on.
	'''

	def __init__(self, modules):
		self.modules = list(modules)
		self.running = []

	def start(self):
		for module in self.modules:
			log.debug('Starting module %r', module.name)
			module.start()
			self.running.append(module)
			log.debug('Started module %r', module.name)

	def stop(self):
		# It is important that, in case of an error, we release as much
		# as possible.  This means that an error in one module should
		# not cause us to not try to stop other modules.
		errors = []
		while self.running:
			module = self.running.pop()
			log.debug('Stopping module %r', module.name)
			try:
				module.stop()
			except Exception:
				log.error('Error when attempting to stop module %r:', module.name)
				traceback.print_exc()
				errors.append(module.name)
				continue
			log.debug('Stopped module %r', module.name)

		if errors:
			raise desklock.UserError('Failed to stop some modules: %s' % ', '.join(errors))
