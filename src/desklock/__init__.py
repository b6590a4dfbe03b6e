# desklock - session idle and lock state daemon
# Watches the X screen saver, logind sleep notifications and logind
# session lock requests, and runs a screen locker accordingly.

import argparse
import sys

# -----------------------------------------------------------------------------
# Exceptions

# Represents an expected failure mode, which is unlikely to be due to
# a bug in desklock.  In this case, we do not need to print an exception
# stack trace; just print the error message and quit.
class UserError(Exception):
	pass

# An event source lost its connection or could not subscribe.
# Fatal: without all sources, the screen might never lock.
class SourceConnectionError(UserError):
	pass

# The locker process could not be started.  Fatal.
class SpawnError(UserError):
	pass

# logind refused to give us a sleep inhibitor lock.
# Not fatal; we just cannot delay sleep until the locker is ready.
class AcquisitionDenied(UserError):
	pass

# Setting the session idle hint failed.  Not fatal.
class PublishError(UserError):
	pass

# -----------------------------------------------------------------------------
# Import desklock modules
# Placed after the declarations above, so that they can be used by the
# imported modules.

import desklock.config
import desklock.daemon
from desklock.logging import log, increase_verbosity

# -----------------------------------------------------------------------------
# Entry point

def parse_args(argv):
	parser = argparse.ArgumentParser(
		prog='desklock',
		description='Run a screen locker when the session goes idle, '
		'is about to sleep, or is asked to lock.',
	)
	parser.add_argument('-v', '--verbose', action='count', default=0,
						help='log more (may be repeated)')
	parser.add_argument('-l', '--pass-inhibitor', action='store_true', default=None,
						help='pass a sleep inhibitor lock to the locker '
						'through XSS_SLEEP_LOCK_FD')
	parser.add_argument('-i', '--idle-hint', action='store_true', default=None,
						help='set the logind session idle hint while locked')
	parser.add_argument('locker_command', nargs=argparse.REMAINDER, metavar='LOCKER',
						help='locker command line, e.g. "xsecurelock"')
	args = parser.parse_args(argv)
	if args.locker_command[:1] == ['--']:
		args.locker_command = args.locker_command[1:]
	return args

def main(argv=None):
	args = parse_args(sys.argv[1:] if argv is None else argv)
	increase_verbosity(args.verbose)

	try:
		config = desklock.config.load(
			locker_command=args.locker_command or None,
			pass_inhibitor=args.pass_inhibitor,
			idle_hint=args.idle_hint,
		)
		desklock.daemon.run(config)
		return 0

	except UserError as e:
		log.critical('Fatal error: %s', e)
		return 1
