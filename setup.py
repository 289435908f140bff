from setuptools import find_packages, setup

package_name = 'mecanum_odometry'

setup(
    name=package_name,
    version='0.1.0',
    packages=find_packages(exclude=['test']),
    install_requires=[
        'numpy',
        'scipy',
        'matplotlib',
    ],
    extras_require={
        'test': ['pytest'],
    },
    python_requires='>=3.8',
    zip_safe=True,
    maintainer='User',
    maintainer_email='user@example.com',
    description='Mecanum drive kinematics and wheel + gyro odometry with exact-arc pose integration',
    license='MIT',
    entry_points={
        'console_scripts': [
            'simulate_odometry = mecanum_odometry.simulate:main',
        ],
    },
)
