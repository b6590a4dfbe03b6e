# desklock.modules.power - system sleep event source
# Receives logind's PrepareForSleep signal.

import desklock.module
from desklock.events import PrepareForSleep
from desklock.modules.logind import MANAGER_INTERFACE, MANAGER_PATH

class PowerSource(desklock.module.Module):
	name = 'power'

	def __init__(self, logind, post):
		super().__init__()
		self.logind = logind
		self.post = post

	def start(self):
		self.logind.subscribe(self.handle_sleep_signal, 'PrepareForSleep',
							  MANAGER_INTERFACE, MANAGER_PATH)

	def stop(self):
		self.logind.unsubscribe(self.handle_sleep_signal, 'PrepareForSleep',
								MANAGER_INTERFACE, MANAGER_PATH)

	# Runs in the GLib main loop thread:
	def handle_sleep_signal(self, start):
		self.log.debug('System is %s sleep', 'entering' if start else 'exiting')
		self.post(PrepareForSleep(bool(start)))
