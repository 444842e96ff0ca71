import codecs
import os.path
import re

from setuptools import setup, find_packages

# We want the value of ``runml.__version__``. However, we cannot
# simply ``import runml`` since runml requires pyparsing which
# might not be installed. Hence we extract the version information
# "manually".
module_dir = os.path.dirname(__file__)
init_filename = os.path.join(module_dir, 'runml', '__init__.py')
with codecs.open(init_filename, 'r' ,'utf8') as f:
    for line in f:
        m = re.match(r'\s*__version__\s*=\s*[\'"](.*)[\'"]\s*', line)
        if m:
            version = m.group(1)
            break
    else:
        raise Exception('Could not find version number.')

setup(
    name='runml',
    version=version,
    description='Translate ml programs to C, compile and run them',
    author='Florian Brucker',
    author_email='mail@florianbrucker.de',
    license='MIT',
    classifiers=[
        'Development Status :: 4 - Beta',
        'Intended Audience :: Developers',
        'Topic :: Software Development :: Code Generators',
        'Topic :: Software Development :: Compilers',
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3',
        'Programming Language :: C',
        'Operating System :: POSIX',
    ],
    keywords='ml compiler translator c',
    packages=find_packages(exclude=['test', 'test.*']),
    python_requires='>=3.8',
    install_requires=['pyparsing >= 3.0'],
    extras_require={'test': ['pytest']},
    platforms=['any'],
    entry_points={'console_scripts':['runml=runml.__main__:main']},
)
