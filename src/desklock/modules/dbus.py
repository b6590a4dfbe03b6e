# desklock.modules.dbus - D-Bus system bus connection

import dbus
from dbus.mainloop.glib import DBusGMainLoop

import desklock
import desklock.module
from desklock.events import SourceFailed

class DBusModule(desklock.module.Module):
	name = 'dbus'

	def __init__(self, glib, post):
		super().__init__()
		self.glib = glib
		self.post = post
		self.dbus_mainloop = None
		self.system_bus = None

	def start(self):
		def setup():
			self.dbus_mainloop = DBusGMainLoop()
			try:
				self.system_bus = dbus.SystemBus(mainloop=self.dbus_mainloop)
			except dbus.DBusException as e:
				raise desklock.SourceConnectionError('Could not connect to the system bus: %s' % (e,)) from e
			# Losing the bus must stop the daemon, not the whole process
			# behind our back.
			self.system_bus.set_exit_on_disconnect(False)
			self.system_bus.add_signal_receiver(
				self.handle_disconnected,
				signal_name='Disconnected',
				dbus_interface='org.freedesktop.DBus.Local',
				path='/org/freedesktop/DBus/Local',
			)
		self.glib.run_sync(setup)

	def stop(self):
		def teardown():
			self.system_bus.remove_signal_receiver(
				self.handle_disconnected,
				signal_name='Disconnected',
				dbus_interface='org.freedesktop.DBus.Local',
				path='/org/freedesktop/DBus/Local',
			)
			self.system_bus.close()
		self.glib.run_sync(teardown)
		self.system_bus = None
		self.dbus_mainloop = None

	# Runs in the GLib main loop thread:
	def handle_disconnected(self):
		self.log.error('Lost connection to the system bus.')
		self.post(SourceFailed(self.name, desklock.SourceConnectionError(
			'Disconnected from the system bus')))
