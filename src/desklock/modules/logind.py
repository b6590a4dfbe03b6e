# desklock.modules.logind - systemd-logind client
# Wraps the parts of the org.freedesktop.login1 API desklock needs:
# signal subscriptions, sleep inhibitor locks, session lookup, and the
# session idle hint.  All bus traffic is done on the GLib thread.

import dbus

import desklock
import desklock.module

LOGIND_BUS_NAME = 'org.freedesktop.login1'
MANAGER_PATH = '/org/freedesktop/login1'
MANAGER_INTERFACE = 'org.freedesktop.login1.Manager'
SESSION_INTERFACE = 'org.freedesktop.login1.Session'

class LogindModule(desklock.module.Module):
	name = 'logind'

	def __init__(self, dbus_module):
		super().__init__()
		self.dbus = dbus_module

	@property
	def glib(self):
		return self.dbus.glib

	def get_object(self, object_path):
		return self.dbus.system_bus.get_object(
			bus_name=LOGIND_BUS_NAME,
			object_path=object_path,
		)

	# Subscribe to a logind signal.  Raises SourceConnectionError.
	def subscribe(self, handler, signal_name, dbus_interface, path):
		def setup():
			self.dbus.system_bus.add_signal_receiver(
				handler,
				signal_name=signal_name,
				dbus_interface=dbus_interface,
				bus_name=LOGIND_BUS_NAME,
				path=path,
			)
		try:
			self.glib.run_sync(setup)
		except dbus.DBusException as e:
			raise desklock.SourceConnectionError('Could not subscribe to %s: %s' % (signal_name, e)) from e

	def unsubscribe(self, handler, signal_name, dbus_interface, path):
		def teardown():
			self.dbus.system_bus.remove_signal_receiver(
				handler,
				signal_name=signal_name,
				dbus_interface=dbus_interface,
				bus_name=LOGIND_BUS_NAME,
				path=path,
			)
		self.glib.run_sync(teardown)

	# Returns the object path of the session with the given ID.
	# Raises SourceConnectionError.
	def get_session_path(self, session_id):
		def call():
			return self.get_object(MANAGER_PATH).GetSession(
				session_id,
				dbus_interface=MANAGER_INTERFACE,
			)
		try:
			return str(self.glib.run_sync(call))
		except dbus.DBusException as e:
			raise desklock.SourceConnectionError('Could not find logind session %r: %s' % (session_id, e)) from e

	# Take an inhibitor lock, returning its file descriptor (which the
	# caller owns).  Raises AcquisitionDenied.
	def inhibit(self, what, who, why, mode):
		def call():
			unix_fd = self.get_object(MANAGER_PATH).Inhibit(
				what, who, why, mode,
				dbus_interface=MANAGER_INTERFACE,
			)
			return unix_fd.take()
		try:
			return self.glib.run_sync(call)
		except dbus.DBusException as e:
			raise desklock.AcquisitionDenied(str(e)) from e

	# Raises PublishError.
	def set_idle_hint(self, session_path, idle):
		def call():
			self.get_object(session_path).SetIdleHint(
				dbus.Boolean(idle),
				dbus_interface=SESSION_INTERFACE,
			)
		try:
			self.glib.run_sync(call)
		except dbus.DBusException as e:
			raise desklock.PublishError(str(e)) from e
