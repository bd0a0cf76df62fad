# -*- coding: utf-8 -*-
import os
import re

from setuptools import setup

with open(os.path.join(os.path.dirname(__file__), 'settle', 'version.py')) as f:
    VERSION = re.search(r"^VERSION = '([^']+)'", f.read(), re.M).group(1)

install_requires = ['Twisted']

setup(name="settle",
      version=VERSION,
      description="Write-once futures with then/catch/finally handlers and generator-driven oroutines",
      author="Greg Hazel and Steven Hazel",
      author_email="sah@awesame.org",
      maintainer="Steven Hazel",
      maintainer_email="sah@awesame.org",
      packages=['settle',
                'settle.twisted_stack'],
      install_requires=install_requires,
      extras_require={'test': ['pytest']},
      python_requires='>=3.7',
      license='MIT'
      )
