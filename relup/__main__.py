from relup.cli.app import main

main()
