import sys
from pathlib import Path

import pytest

# Allow running the tests from a source checkout.
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

from desklock.config import Config


@pytest.fixture
def config():
	return Config(
		session_id='2',
		display=':0',
		locker_command=('xsecurelock',),
		pass_inhibitor=True,
		idle_hint=True,
	)
