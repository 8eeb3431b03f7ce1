from bryx_bot.main import main

main()
