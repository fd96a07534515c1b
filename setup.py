from setuptools import setup

__version__ = "0.3.0"
__author__ = "gust contributors"

setup( name = 'gust',
       version = __version__,
       description = 'Python API for the gust weather service',
       author = __author__,
       packages = [ 'gust' ],
       zip_safe = True,
       python_requires = '>=3.8',
       install_requires = [ 'requests', 'rich' ],
       extras_require = {
           'test': [ 'pytest' ],
       },
       long_description = 'Python API for gust: browser login against the gust server and a weather API client that tracks its rate limit quota.',
)
