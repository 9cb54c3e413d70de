"""Shared fixtures for core unit tests"""

import pytest

from mdtree.core.parse import parse_string


SAMPLE_MD = """\
---
title: Sample
count: 3
tags:
  - alpha
  - beta
---

Intro paragraph before any section.

<!-- section:features -->
# Features

<!-- summary -->Fast and small.

Second paragraph.

## Images

![Logo](logo.png)

<!-- gallery... -->
![One](one.png)
![Two](two.png)
<!-- / -->

## Links

See [Docs](https://example.com/docs) and [Docs](https://example.com/docs).

<!-- section:faq -->
## Why?

Because.

<!-- sub:answer -->
### Answer

- yes
- no
<!-- /sub -->
"""


@pytest.fixture(name="sample_md")
def sample_md_fixture():
    return SAMPLE_MD


@pytest.fixture(name="tree")
def tree_fixture():
    return parse_string(SAMPLE_MD)
