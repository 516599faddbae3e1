from paintbar.app import main

main()
