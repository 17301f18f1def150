from .action import main

main()
