from dlwrap.cli import main

main()
