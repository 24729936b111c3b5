from vcx.main import main

main()
