from pathlib import Path

from setuptools import find_packages, setup


def get_readme():
    """Load README.rst for display on PyPI."""
    with open("README.rst") as fhandle:
        return fhandle.read()


def get_extra_requires(path: str):
    req = Path(path).read_text()
    req = req.split('.. tab-end')[1]
    req = req.strip()
    req = req.split('\n')

    req_dict = {'all': set()}
    for r in req:
        pack, key = (_.strip() for _ in r.split(':'))
        req_dict['all'].add(pack)

        if key in req_dict:
            req_dict[key].add(pack)
        else:
            req_dict[key] = {pack}

    return req_dict


with open('oatscreen/_version.py', 'r') as file:
    exec(file.read())

setup(
    name="oatscreen",
    version=__version__,
    description="Morris one-at-a-time screening for global sensitivity analysis",
    long_description=get_readme(),
    packages=find_packages(),
    include_package_data=True,
    package_dir={"oatscreen": "oatscreen"},
    install_requires=['numpy>=1.20', 'PyYAML>=5.1', 'tables>=3.6', 'dask[array]>=2021.3', 'psutil>=5.6',
                      'tqdm>=4.0'],
    python_requires='>=3.8',
    extras_require=get_extra_requires('extra_requirements.txt'),
)
