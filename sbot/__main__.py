from sbot.cli.app import main

main()
