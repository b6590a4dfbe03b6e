# desklock.modules.session - logind session event source
# Receives Lock / Unlock requests for our session (e.g. from
# "loginctl lock-session"), and sets the session's idle hint.

import desklock.module
from desklock.events import LockRequested, UnlockRequested
from desklock.modules.logind import SESSION_INTERFACE

class SessionSource(desklock.module.Module):
	name = 'session'

	def __init__(self, logind, session_id, post):
		super().__init__()
		self.logind = logind
		self.session_id = session_id
		self.post = post

		# D-Bus object path of our session.  Resolved on start.
		self.session_path = None

	def start(self):
		self.session_path = self.logind.get_session_path(self.session_id)
		self.log.debug('Session %s is at %s', self.session_id, self.session_path)
		self.logind.subscribe(self.handle_lock, 'Lock', SESSION_INTERFACE, self.session_path)
		try:
			self.logind.subscribe(self.handle_unlock, 'Unlock', SESSION_INTERFACE, self.session_path)
		except desklock.SourceConnectionError:
			self.logind.unsubscribe(self.handle_lock, 'Lock', SESSION_INTERFACE, self.session_path)
			raise

	def stop(self):
		self.logind.unsubscribe(self.handle_unlock, 'Unlock', SESSION_INTERFACE, self.session_path)
		self.logind.unsubscribe(self.handle_lock, 'Lock', SESSION_INTERFACE, self.session_path)
		self.session_path = None

	# Runs in the GLib main loop thread:
	def handle_lock(self):
		self.log.debug('Got Lock signal.')
		self.post(LockRequested())

	# Runs in the GLib main loop thread:
	def handle_unlock(self):
		self.log.debug('Got Unlock signal.')
		self.post(UnlockRequested())

	# Raises desklock.PublishError.
	def set_idle_hint(self, idle):
		self.logind.set_idle_hint(self.session_path, idle)
