# desklock.modules.glib - GLib main loop
# Runs a GLib MainLoop in a thread.
# D-Bus signal handlers run there, and so must D-Bus calls.

import concurrent.futures
import threading

from gi.repository import GLib

import desklock.module

class GLibModule(desklock.module.Module):
	name = 'glib'

	def __init__(self):
		super().__init__()
		self.mainloop = None
		self.glib_thread = None

	def start(self):
		self.mainloop = GLib.MainLoop()
		self.glib_thread = threading.Thread(target=self.mainloop.run, name='glib')
		self.glib_thread.start()

	def stop(self):
		self.run_async(self.mainloop.quit)
		self.glib_thread.join()
		self.mainloop = None
		self.glib_thread = None

	# Run a function on the GLib main loop thread, discarding the
	# return value.
	def run_async(self, func, *args):
		# There is at most one GLib main loop in desklock, attached to
		# the default context, so idle_add reaches it.
		def run():
			func(*args)
			return GLib.SOURCE_REMOVE
		GLib.idle_add(run)

	# Run a function on the GLib main loop thread and wait for it,
	# propagating its return value or exception.
	def run_sync(self, func, *args):
		if threading.current_thread() is self.glib_thread:
			return func(*args)

		future = concurrent.futures.Future()
		def run():
			try:
				future.set_result(func(*args))
			except Exception as e:
				future.set_exception(e)
			return GLib.SOURCE_REMOVE
		GLib.idle_add(run)
		return future.result()
