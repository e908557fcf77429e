from aistudy.main import main

main()
