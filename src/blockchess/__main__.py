from blockchess.app import main

main()
