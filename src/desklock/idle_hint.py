# desklock.idle_hint - publishes the session idle hint to logind
# The idle hint is advisory (used by e.g. logind's IdleAction), so
# failing to set it is logged and otherwise ignored.

import desklock
from desklock.logging import log

class IdleHintPublisher:
	def __init__(self, set_idle_hint, enabled):
		self.log = log.getChild('idle_hint')

		# Callable setting the hint; raises desklock.PublishError.
		self.set_idle_hint = set_idle_hint
		self.enabled = enabled

		# Last value logind accepted, or None if unknown.
		self.published = None

	def publish(self, idle):
		if not self.enabled or idle == self.published:
			return
		self.log.debug('%s idle hint.', 'Setting' if idle else 'Clearing')
		try:
			self.set_idle_hint(idle)
		except desklock.PublishError as e:
			self.log.warning('Could not set idle hint: %s', e)
			self.published = None
		else:
			self.published = idle
