"""le-route53 main entry point."""
import sys

from le_route53 import main

if __name__ == '__main__':
    sys.exit(main.main())
