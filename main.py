"""Run the cipher service from a source checkout."""
from cipher_service.cli import main

if __name__ == "__main__":
    main()
