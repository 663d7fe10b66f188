# SPDX-License-Identifier: Apache-2.0
from globeviz.cli import main

if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
