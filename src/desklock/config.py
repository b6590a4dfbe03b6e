# desklock.config - loads the configuration
# The configuration is read once at startup and does not change for
# the lifetime of the daemon.

import dataclasses
import importlib.util
import os
import shlex
import sys

import desklock
from desklock.logging import log

@dataclasses.dataclass(frozen=True)
class Config:
	# logind session ID (XDG_SESSION_ID) we lock and unlock.
	session_id: str

	# X11 DISPLAY string of the display we watch for idleness.
	display: str

	# Locker program and its arguments.
	locker_command: tuple

	# Pass a duplicate of our sleep inhibitor lock to the locker, via
	# XSS_SLEEP_LOCK_FD, so that the system waits for it to be ready
	# before going to sleep.
	pass_inhibitor: bool = False

	# Set the logind session idle hint while the locker runs.
	idle_hint: bool = False


def get_config_files():
	config_dirs = os.getenv('XDG_CONFIG_DIRS', '/etc/xdg').split(':')
	config_home = os.getenv('XDG_CONFIG_HOME', os.path.expanduser('~/.config'))
	return [d + '/desklock/config.py' for d in [config_home] + config_dirs if d]

# Load the first configuration file found, returning its settings as a
# dict.  Only known settings are picked up.
def load_file():
	config_files = get_config_files()
	for config_file in config_files:
		if os.path.exists(config_file):
			log.debug('Loading configuration from %r.', config_file)

			# https://docs.python.org/3/library/importlib.html#importing-a-source-file-directly
			module_name = 'desklock_user_config'
			spec = importlib.util.spec_from_file_location(module_name, config_file)
			module = importlib.util.module_from_spec(spec)
			sys.modules[module_name] = module
			spec.loader.exec_module(module)

			return {
				key: getattr(module, key)
				for key in ('locker_command', 'pass_inhibitor', 'idle_hint')
				if hasattr(module, key)
			}

	log.debug('No configuration file found (looked in: %r).', config_files)
	return {}

# Build the configuration.  Arguments which are None are taken from the
# configuration file, if it sets them.
def load(locker_command=None, pass_inhibitor=None, idle_hint=None):
	settings = load_file()

	if locker_command is None:
		locker_command = settings.get('locker_command')
	if isinstance(locker_command, str):
		locker_command = shlex.split(locker_command)
	if not locker_command:
		raise desklock.UserError('Locker command not provided')

	if pass_inhibitor is None:
		pass_inhibitor = settings.get('pass_inhibitor', False)
	if idle_hint is None:
		idle_hint = settings.get('idle_hint', False)

	session_id = os.getenv('XDG_SESSION_ID')
	if not session_id:
		raise desklock.UserError('XDG_SESSION_ID not set')

	display = os.getenv('DISPLAY')
	if not display:
		raise desklock.UserError('DISPLAY not set - not running in an X11 session?')

	config = Config(
		session_id=session_id,
		display=display,
		locker_command=tuple(locker_command),
		pass_inhibitor=bool(pass_inhibitor),
		idle_hint=bool(idle_hint),
	)
	log.debug('Configuration: %s', config)
	return config
