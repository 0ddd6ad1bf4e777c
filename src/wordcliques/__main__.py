"""Main entry point for the word clique finder."""

from wordcliques import main

if __name__ == "__main__":
    main()
