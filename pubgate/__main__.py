from pubgate.cli.app import main

main()
