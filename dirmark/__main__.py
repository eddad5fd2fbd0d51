from dirmark.cli import main

main()
