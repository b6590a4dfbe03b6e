from setuptools import setup

setup(
	name='desklock',
	version='0.1.0',
	description='Session idle and lock state daemon',
	packages=['desklock', 'desklock.modules'],
	package_dir={'':'src'},
	python_requires='>=3.10',
	install_requires=[
		'dbus-python',
		'PyGObject',
		'python-xlib>=0.31',
	],
	extras_require={
		'test': [
			'pytest',
			'pytest-mock',
		],
	},
	entry_points={
		'console_scripts': [
			'desklock=desklock:main',
		]
	}
)
