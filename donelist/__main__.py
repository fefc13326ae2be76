from donelist.cli import main

main()
