from cppkg.cli import main

main()
