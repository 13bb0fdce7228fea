from booking_relay.app import main

main()
