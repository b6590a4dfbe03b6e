# desklock.logging - logging setup

import logging
import os

# Severity levels specific to desklock.
# SECURITY is used for events which change whether the screen is
# protected (locker started, locker gone).
TRACE = logging.DEBUG - 5
SECURITY = logging.ERROR - 5

logging.addLevelName(TRACE, 'TRACE')
logging.addLevelName(SECURITY, 'SECURITY')

class Logger(logging.getLoggerClass()):
	def trace(self, *args, **kwargs):
		self.log(TRACE, *args, **kwargs)

	def security(self, *args, **kwargs):
		self.log(SECURITY, *args, **kwargs)

logging.setLoggerClass(Logger)

# Indexed by 4 + verbosity, so that 0 means INFO.
LEVELS = [
	logging.CRITICAL,
	logging.ERROR,
	SECURITY,
	logging.WARNING,
	logging.INFO,
	logging.DEBUG,
	TRACE,
]

def level_for(verbosity):
	return LEVELS[max(0, min(len(LEVELS) - 1, 4 + verbosity))]

logging.basicConfig(
	format=os.getenv('DESKLOCK_LOG_FORMAT', '%(name)s: %(message)s'),
	level=level_for(int(os.getenv('DESKLOCK_VERBOSE', '0'))),
)
log = logging.getLogger('desklock')

# Raise the verbosity by the given number of steps (-v flags on the
# command line), on top of DESKLOCK_VERBOSE.
def increase_verbosity(steps):
	if steps:
		log.setLevel(level_for(int(os.getenv('DESKLOCK_VERBOSE', '0')) + steps))
