import os.path
import re

from paver.tasks import task
from paver.easy import sh


def tell(x):
    print()
    print(("-"*10)+ str(x) + ("-"*10))
    print()

@task
def build(quiet=True):
    """ Builds the ecblind distribution, ready to be uploaded to pypi. """
    tell("Build dist")
    sh('python setup.py sdist', capture=quiet)

@task
def test(quiet=False):
    """ Run the ecblind unit tests and doctests, with coverage. """
    tell("Run the tests")
    sh('pytest -v --doctest-modules --cov=ecblind ecblind', capture=quiet)

@task
def upload(quiet=False):
    """ Uploads the latest distribution to pypi. """

    lib = open(os.path.join("ecblind", "__init__.py")).read()
    v = re.findall("VERSION.*=.*['\"](.*)['\"]", lib)[0]

    tell("upload dist %s" % v)
    sh('git tag -a v%s -m "Distribution version v%s"' % (v, v))
    sh('python setup.py sdist upload', capture=quiet)
    tell('Remember to upload tags using "git push --tags"')

@task
def lint(quiet=False):
    """ Run the python linter on ecblind. """
    tell("Run pylint on the library")
    sh('pylint ecblind', capture=quiet)

@task
def wc(quiet=False):
    """ Count the ecblind library code lines. """
    tell("Counting code lines")

    print("\nLibrary code:")
    sh('wc -l ecblind/*.py', capture=quiet)

    print("\nAdministration code:")
    sh('wc -l pavement.py setup.py', capture=quiet)
