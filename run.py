# Entry point when running from a checkout: python run.py command=explain query=MyClass
from repo_brain.cli import main


if __name__ == "__main__":
    main()
