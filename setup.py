import io

from setuptools import find_packages, setup

with io.open('calysto_c6461/_version.py', encoding="utf-8") as fid:
    for line in fid:
        if line.startswith('__version__'):
            __version__ = line.strip().split()[-1][1:-1]
            break

with open('README.md') as f:
    readme = f.read()

setup(name='calysto_c6461',
      version=__version__,
      description='A C6461 assembler, simulator and Jupyter kernel based on MetaKernel',
      long_description=readme,
      long_description_content_type='text/markdown',
      install_requires=["metakernel", "jupyter_client"],
      extras_require={"test": ["pytest"]},
      packages=find_packages(include=["calysto_c6461", "calysto_c6461.*"]),
      entry_points={
          'console_scripts': [
              'c6461-assemble = calysto_c6461.cli:main',
          ],
      },
      classifiers = [
          'Framework :: IPython',
          'License :: OSI Approved :: BSD License',
          'Programming Language :: Python :: 3',
          'Topic :: Software Development :: Assemblers',
          'Topic :: System :: Emulators',
      ]
)
