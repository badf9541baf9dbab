import logging

import pytest

CONTROL = """
running 3 tests
test a::one           ... bench:       1,000 ns/iter (+/- 10)
test a::two           ... bench:         200 ns/iter (+/- 5) = 1,500 MB/s
test b::only_control  ... bench:          50 ns/iter (+/- 1)

test result: ok. 0 passed; 0 failed; 0 ignored; 3 measured
"""

VARIABLE = """
   Compiling demo v0.1.0 (/tmp/demo)
    Finished release [optimized] target(s) in 1.23 secs
     Running target/release/demo-0b2ac3a5

running 3 tests
test a::one           ... bench:         800 ns/iter (+/- 12)
test a::two           ... bench:         300 ns/iter (+/- 6) = 1,000 MB/s
test b::only_variable ... bench:          70 ns/iter (+/- 2)

test result: ok. 0 passed; 0 failed; 0 ignored; 3 measured
"""

MODULES = """
test dense::add   ... bench:         100 ns/iter (+/- 3)
test dense::mul   ... bench:         400 ns/iter (+/- 8)
test dense::extra ... bench:          10 ns/iter (+/- 1)
test sparse::add  ... bench:         150 ns/iter (+/- 4)
test sparse::mul  ... bench:         200 ns/iter (+/- 9)
test toplevel     ... bench:           5 ns/iter (+/- 0)
"""


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    logger = logging.getLogger("benchcmp")
    logger.handlers = []
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def control_file(tmp_path):
    path = tmp_path / "control.txt"
    path.write_text(CONTROL)
    return path


@pytest.fixture
def variable_file(tmp_path):
    path = tmp_path / "variable.txt"
    path.write_text(VARIABLE)
    return path


@pytest.fixture
def modules_file(tmp_path):
    path = tmp_path / "modules.txt"
    path.write_text(MODULES)
    return path
