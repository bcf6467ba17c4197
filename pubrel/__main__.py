from pubrel.cli.app import main

main()
