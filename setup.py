from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="django-creatorpay",
    version="0.1.0",
    description="Django creator-earnings platform with M-Pesa payments through PayHero",
    long_description=long_description,
    long_description_content_type="text/markdown",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Framework :: Django",
        "Framework :: Django :: 4.2",
        "Framework :: Django :: 5.0",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    packages=find_packages(exclude=["creatorpay.tests", "creatorpay.tests.*"]),
    include_package_data=True,
    python_requires=">=3.10",
    install_requires=[
        "Django>=4.2",
        "djangorestframework>=3.14.0",
        "requests>=2.25.0",
        "django-filter>=23.1",
        "django-model-utils>=4.3.0",
        "django-money>=3.0.0",
        "pytz>=2021.1",
        "celery>=5.2.0",
        "xlsxwriter>=3.0.0",
        "reportlab>=3.6.0",
    ],
    extras_require={
        "tests": [
            "pytest>=7.0",
            "pytest-django>=4.5",
        ],
    },
    zip_safe=False,
)
