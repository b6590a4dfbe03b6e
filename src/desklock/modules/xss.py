# desklock.modules.xss - X screen saver event source
# Listens to MIT-SCREEN-SAVER extension notifications, which tell us
# when the X server considers the display idle (the screen saver
# activates) and when it stops being idle.

import os
import select
import threading

import Xlib.display
import Xlib.error
from Xlib.ext import screensaver

import desklock
import desklock.module
from desklock.events import ScreenIdleChanged, SourceFailed

class DisplayIdleSource(desklock.module.Module):
	name = 'xss'

	def __init__(self, display_name, post):
		super().__init__()
		self.display_name = display_name
		self.post = post

		# Xlib Display connection.
		self.display = None

		# X event type of screen saver Notify events on this display.
		self.notify_event = None

		# Reader thread, and the pipe used to wake it up for stopping.
		self.reader_thread = None
		self.wakeup_r = None
		self.wakeup_w = None

	def start(self):
		try:
			self.display = Xlib.display.Display(self.display_name)
		except (Xlib.error.DisplayError, Xlib.error.ConnectionClosedError) as e:
			raise desklock.SourceConnectionError(
				'Could not connect to X display %r: %s' % (self.display_name, e)) from e

		extension = self.display.query_extension(screensaver.extname)
		if extension is None:
			self.display.close()
			self.display = None
			raise desklock.SourceConnectionError('X Screen Saver extension not present')
		self.notify_event = extension.first_event

		# TODO: watch all screens, not just the default one.
		try:
			root = self.display.screen().root
			root.screensaver_select_input(screensaver.NotifyMask | screensaver.CycleMask)
			self.display.sync()
		except Exception as e:
			self.display.close()
			self.display = None
			raise desklock.SourceConnectionError(
				'Could not select screen saver events on X display %r: %s' % (self.display_name, e)) from e

		(self.wakeup_r, self.wakeup_w) = os.pipe()
		self.reader_thread = threading.Thread(target=self.reader, name='xss')
		self.reader_thread.start()
		self.log.debug('Listening to screen saver events on %s.', self.display_name)

	def stop(self):
		os.write(self.wakeup_w, b'x')
		self.reader_thread.join()
		self.reader_thread = None

		os.close(self.wakeup_r)
		os.close(self.wakeup_w)
		(self.wakeup_r, self.wakeup_w) = (None, None)

		self.display.close()
		self.display = None

	# Runs in the reader thread:
	def reader(self):
		fds = [self.display.fileno(), self.wakeup_r]
		try:
			while True:
				while self.display.pending_events():
					self.handle_event(self.display.next_event())
				(readable, _, _) = select.select(fds, [], [])
				if self.wakeup_r in readable:
					break
		except Xlib.error.ConnectionClosedError as e:
			self.log.error('Lost connection to X display %s.', self.display_name)
			self.post(SourceFailed(self.name, desklock.SourceConnectionError(
				'Lost connection to X display %r: %s' % (self.display_name, e))))
			return
		except Exception as e:
			self.log.exception('Error reading events from X display %s:', self.display_name)
			self.post(SourceFailed(self.name, desklock.SourceConnectionError(
				'Error reading events from X display %r: %s' % (self.display_name, e))))
			return
		self.log.debug('Reader thread exiting.')

	def handle_event(self, event):
		if event.type != self.notify_event:
			self.log.trace('Ignoring X event %r', event)
			return

		match event.state:
			case screensaver.StateOn:
				self.post(ScreenIdleChanged(True))
			case screensaver.StateOff:
				self.post(ScreenIdleChanged(False))
			case screensaver.StateCycle:
				self.log.trace('Screen saver cycled.')
			case _:
				self.log.debug('Unknown screen saver state: %r', event.state)
