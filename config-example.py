# Sample desklock configuration file.
# Copy to ~/.config/desklock/config.py (or /etc/xdg/desklock/config.py).
# Options given on the command line take precedence.

# The screen locker to run, as a list of arguments or a shell-like
# string.  The locker should stay in the foreground while the screen
# is locked, and exit once it is unlocked.
locker_command = ['xsecurelock']

# Give the locker a sleep inhibitor lock through XSS_SLEEP_LOCK_FD,
# so that the system waits until the locker is ready before sleeping.
# Only enable this for lockers which close that descriptor when ready
# (such as xsecurelock); others hold off sleep until logind's
# InhibitDelayMaxSec expires.
pass_inhibitor = True

# Mark the logind session as idle while the screen is locked.
idle_hint = False
